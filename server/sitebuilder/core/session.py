# sitebuilder/core/session.py
"""
Client-side conversation state: chat id, transcript, reconciled files and the
current preview. Lives only in the caller; the relay keeps nothing between
requests.
"""
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import RequestValidationFailed
from .reconcile import CanonicalFile, ReconciliationState, reconcile, valid_files

logger = logging.getLogger(__name__)

CREATE_ENDPOINT = "/api/chat"
SEND_ENDPOINT = "/api/chat/send"


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _last_assistant_text(data: Dict[str, Any]) -> Optional[str]:
    # reshaped follow-ups carry the reply only in their message list
    messages = data.get("messages") or []
    for m in reversed(messages if isinstance(messages, list) else []):
        if isinstance(m, dict) and m.get("role") == "assistant" and m.get("content"):
            return m["content"]
    return None


class ConversationPhase(str, Enum):
    NO_CONVERSATION = "no_conversation"
    ACTIVE = "active"


class ConversationSession:
    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        """Start a new conversation: forget the chat id, transcript, files and preview."""
        self.chat_id: Optional[str] = None
        self.transcript: List[Dict[str, Any]] = []
        self.files_state = ReconciliationState.empty()
        self.chat: Optional[Dict[str, Any]] = None

    @property
    def phase(self) -> ConversationPhase:
        return ConversationPhase.ACTIVE if self.chat_id else ConversationPhase.NO_CONVERSATION

    @property
    def files(self) -> List[CanonicalFile]:
        return valid_files(self.files_state.files)

    @property
    def demo_url(self) -> Optional[str]:
        return (self.chat or {}).get("demoUrl")

    @property
    def title(self) -> Optional[str]:
        return (self.chat or {}).get("title")

    def _append(self, role: str, content: str, **extra) -> Dict[str, Any]:
        entry = {"role": role, "content": content, "timestamp": utc_timestamp()}
        entry.update(extra)
        self.transcript.append(entry)
        return entry

    def build_request(self, prompt: str):
        """
        Return (endpoint, body) for the next user message and record it in the
        transcript. The first message creates a chat; later ones continue it.
        """
        text = (prompt or "").strip()
        if not text:
            raise RequestValidationFailed("Message is required")
        self._append("user", text)
        if self.phase is ConversationPhase.ACTIVE:
            return SEND_ENDPOINT, {"chatId": self.chat_id, "message": text}
        return CREATE_ENDPOINT, {"message": text}

    def apply_response(self, data: Dict[str, Any]) -> None:
        """Fold a successful relay `data` payload into the session."""
        if self.phase is ConversationPhase.NO_CONVERSATION:
            self.chat_id = data.get("chatId")
            self._append("assistant", f"Created: {data.get('title')}", chatData=data)
            self._set_chat(data)
            logger.info("Conversation started: %s", self.chat_id)
            return

        self._append("assistant", data.get("content") or data.get("text") or _last_assistant_text(data) or "Message received")
        if data.get("files") or data.get("demoUrl") or data.get("latestVersion"):
            latest = data.get("latestVersion") or {}
            status = latest.get("status") or data.get("status") or "completed"
            self._set_chat({
                "chatId": data.get("id") or data.get("chatId"),
                "title": data.get("title") or data.get("name"),
                "createdAt": data.get("createdAt"),
                "webUrl": data.get("webUrl"),
                "demoUrl": latest.get("demoUrl") or data.get("demoUrl"),
                "files": latest.get("files") or data.get("files") or [],
                "messages": data.get("messages") or [],
                "status": status,
                "isCompleted": status == "completed",
            })

    def record_error(self, message: str) -> None:
        self._append("assistant", f"Error: {message}", isError=True)

    def _set_chat(self, chat: Dict[str, Any]) -> None:
        self.chat = chat
        self.files_state = reconcile(self.files_state, chat.get("files"))
