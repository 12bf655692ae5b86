# sitebuilder/api/chat.py
import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..core.chat_format import format_chat_response
from ..core.errors import MissingCredentialError, RequestValidationFailed, UpstreamError
from ..core.session import utc_timestamp
from ..core.v0_client import V0Client, get_v0_client
from ..models import ChatData, ChatRequest, ChatResponse, SendMessageRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse(model, body: Any):
    # a non-object body or wrongly typed fields count as missing fields
    if not isinstance(body, dict):
        return model()
    try:
        return model.model_validate(body)
    except ValidationError:
        return model()


def _ok(chat: dict) -> dict:
    try:
        data = ChatData.model_validate(chat)
    except ValidationError as e:
        raise UpstreamError(f"v0 returned a chat that could not be reshaped: {e.error_count()} invalid field(s)") from e
    return ChatResponse(data=data, timestamp=utc_timestamp()).model_dump()


def _require_client(client: Optional[V0Client]) -> V0Client:
    if client is None:
        raise MissingCredentialError("No V0 API key found!")
    return client


@router.post("/chat")
def create_chat(body: Any = Body(None), client: Optional[V0Client] = Depends(get_v0_client)):
    req = _parse(ChatRequest, body)
    if not req.message:
        raise RequestValidationFailed("Message is required")

    try:
        chat = _require_client(client).create_chat(req.message)
        return _ok(format_chat_response(chat))
    except (UpstreamError, MissingCredentialError) as e:
        logger.exception("Chat creation error")
        return JSONResponse(status_code=500, content={"error": "Failed to create chat", "details": str(e)})


@router.post("/chat/send")
def send_message(body: Any = Body(None), client: Optional[V0Client] = Depends(get_v0_client)):
    req = _parse(SendMessageRequest, body)
    if not req.chatId or not req.message:
        raise RequestValidationFailed("Chat ID and message are required")

    try:
        chat = _require_client(client).send_message(req.chatId, req.message)
        return _ok(format_chat_response(chat))
    except (UpstreamError, MissingCredentialError):
        logger.exception("Send message error")
        return JSONResponse(status_code=500, content={"error": "Failed to send message"})
