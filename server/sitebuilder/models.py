from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional


class ChatRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")
    message: Optional[str] = None


class SendMessageRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")
    chatId: Optional[str] = None
    message: Optional[str] = None


class ChatMessage(BaseModel):
    id: Any = None
    role: Optional[str] = None
    content: Optional[str] = None
    createdAt: Optional[str] = None


class ChatData(BaseModel):
    chatId: Optional[str] = None
    title: Optional[str] = None
    createdAt: Optional[str] = None
    webUrl: Optional[str] = None
    demoUrl: Optional[str] = None
    # raw records without a name are relayed untouched, so this stays loose
    files: List[Dict[str, Any]] = Field(default_factory=list)
    messages: List[ChatMessage] = Field(default_factory=list)
    status: str = "unknown"
    isCompleted: bool = False


class ChatResponse(BaseModel):
    success: bool = True
    data: ChatData
    timestamp: str


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: str
    message: str
