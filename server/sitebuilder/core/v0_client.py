# sitebuilder/core/v0_client.py
import os
import json
import time
import logging
from typing import Any, Dict, Optional

import requests

from ..utils import config
from .errors import MissingCredentialError, UpstreamError

logger = logging.getLogger(__name__)


def _save_debug_log(prefix: str, payload: Any):
    if not config.DEBUG_DUMPS:
        return
    try:
        os.makedirs(config.LOG_DIR, exist_ok=True)
        fname = f"{int(time.time())}_{prefix}.json"
        path = os.path.join(config.LOG_DIR, fname)
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2, ensure_ascii=False, default=str)
    except Exception:
        logger.exception("Failed to write debug log")


def _error_message(resp: requests.Response) -> str:
    """
    Pull a human readable message out of an upstream error response.
    v0 answers with {"error": {"message": ...}} but older deployments
    used {"error": "..."} or {"message": "..."}.
    """
    try:
        body = resp.json()
    except ValueError:
        text = (resp.text or "").strip()
        return text[:500] if text else f"HTTP {resp.status_code}"
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict) and err.get("message"):
            return str(err["message"])
        if isinstance(err, str) and err:
            return err
        if body.get("message"):
            return str(body["message"])
    return f"HTTP {resp.status_code}"


class V0Client:
    """
    Thin wrapper over the two v0 Platform API calls the relay needs:
    create a chat from a prompt, and send a follow-up message to a chat.
    No retries: a failed call surfaces immediately as UpstreamError.
    """

    def __init__(self, api_key: Optional[str], base_url: str = None, timeout: int = None, session=None) -> None:
        if not api_key:
            raise MissingCredentialError(f"{config.V0_API_KEY_ENV} is not set; refusing to call the v0 API.")
        self.base_url = (base_url or config.V0_API_BASE).rstrip("/")
        self.timeout = timeout or config.V0_TIMEOUT
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            }
        )

    def chats_url(self) -> str:
        return f"{self.base_url}/chats"

    def messages_url(self, chat_id: str) -> str:
        return f"{self.base_url}/chats/{chat_id}/messages"

    def _post(self, url: str, body: Dict[str, Any], tag: str) -> Dict[str, Any]:
        start_ts = time.time()
        try:
            resp = self.session.post(url, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            logger.exception("v0 request to %s failed", url)
            raise UpstreamError(f"v0 request failed: {e}") from e

        duration = time.time() - start_ts
        logger.info("v0 %s -> %s in %.1fs", tag, resp.status_code, duration)

        if resp.status_code >= 400:
            msg = _error_message(resp)
            _save_debug_log(f"v0_{tag}_error", {"url": url, "status": resp.status_code, "body": resp.text})
            raise UpstreamError(msg, status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            _save_debug_log(f"v0_{tag}_unparseable", {"url": url, "body": resp.text})
            raise UpstreamError("v0 returned a non-JSON response", status_code=resp.status_code) from e
        if not isinstance(data, dict):
            raise UpstreamError("v0 returned an unexpected response shape", status_code=resp.status_code, payload=data)

        _save_debug_log(f"v0_{tag}", data)
        return data

    def create_chat(self, message: str) -> Dict[str, Any]:
        logger.info("Creating chat (%d chars)", len(message))
        return self._post(self.chats_url(), {"message": message}, "create_chat")

    def send_message(self, chat_id: str, message: str) -> Dict[str, Any]:
        logger.info("Sending message (%d chars) to chat %s", len(message), chat_id)
        return self._post(self.messages_url(chat_id), {"message": message}, "send_message")


def get_v0_client() -> Optional[V0Client]:
    """
    FastAPI dependency. Returns None when the credential is missing so the
    route can still validate its input first and then refuse the call.
    """
    api_key = config.get_api_key()
    if not api_key:
        logger.error("No %s found; chat operations are disabled", config.V0_API_KEY_ENV)
        return None
    return V0Client(api_key)
