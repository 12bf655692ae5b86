# sitebuilder/core/chat_format.py
"""
Reshape raw v0 chat objects into the flat structure the client consumes:

    {chatId, title, createdAt, webUrl, demoUrl, files, messages, status, isCompleted}
"""
import logging
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


def _raw_extension(name: str) -> str:
    # "index.html" -> "html", "Makefile" -> "Makefile" (no dot keeps the whole name)
    ext = name.split(".")[-1]
    return ext or "unknown"


def _str_or_none(v: Any):
    return None if v is None else str(v)


def _format_file(f: Any) -> Any:
    if not isinstance(f, dict) or not f.get("name"):
        # not the {name, content} shape; the client-side normalizer decides
        return f
    name = str(f["name"])
    content = f.get("content")
    if content is not None and not isinstance(content, str):
        content = str(content)
    return {
        "name": name,
        "content": content,
        "type": _raw_extension(name),
        "size": len(content) if content else 0,
    }


def _format_message(m: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": m.get("id"),
        "role": m.get("role"),
        "content": m.get("content"),
        "createdAt": m.get("createdAt"),
    }


def format_chat_response(chat: Dict[str, Any]) -> Dict[str, Any]:
    latest = chat.get("latestVersion") or {}
    if not isinstance(latest, dict):
        latest = {}

    raw_files = latest.get("files") or []
    # non-object records are not files in any known shape
    files: List[Any] = [_format_file(f) for f in raw_files if isinstance(f, dict)] if isinstance(raw_files, list) else []

    raw_messages = chat.get("messages") or []
    messages = [_format_message(m) for m in raw_messages if isinstance(m, dict)] if isinstance(raw_messages, list) else []

    status = latest.get("status") or "unknown"
    formatted = {
        "chatId": _str_or_none(chat.get("id")),
        "title": chat.get("title") or chat.get("name"),
        "createdAt": chat.get("createdAt"),
        "webUrl": chat.get("webUrl"),
        "demoUrl": latest.get("demoUrl") or None,
        "files": files,
        "messages": messages,
        "status": status,
        "isCompleted": status == "completed",
    }
    logger.debug("Formatted chat %s: %d files, %d messages", formatted["chatId"], len(files), len(messages))
    return formatted
