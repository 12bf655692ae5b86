# sitebuilder/core/relay_client.py
import logging
from typing import Any, Dict, Optional

import requests

from ..utils import config
from .errors import RelayError
from .session import ConversationSession

logger = logging.getLogger(__name__)


class SiteBuilderClient:
    """Talks to a running relay and keeps the conversation session up to date."""

    def __init__(self, base_url: str = None, session: Optional[ConversationSession] = None,
                 http=None, timeout: int = None) -> None:
        self.base_url = (base_url or config.RELAY_URL).rstrip("/")
        self.session = session or ConversationSession()
        self.http = http or requests.Session()
        self.timeout = timeout or config.RELAY_TIMEOUT

    def health(self) -> Dict[str, Any]:
        resp = self.http.get(f"{self.base_url}/api/health", timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def send(self, prompt: str) -> Dict[str, Any]:
        """
        Send one user message. Creates the chat on the first call and continues
        it afterwards. Errors are recorded in the transcript and re-raised.
        """
        endpoint, body = self.session.build_request(prompt)
        try:
            data = self._post(endpoint, body)
        except RelayError as e:
            self.session.record_error(e.message)
            raise
        self.session.apply_response(data)
        return data

    def new_conversation(self) -> None:
        self.session.reset()

    def _post(self, endpoint: str, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}{endpoint}"
        try:
            resp = self.http.post(url, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            logger.exception("Relay request to %s failed", url)
            raise RelayError(str(e)) from e

        try:
            payload = resp.json()
        except ValueError:
            payload = {}

        if not resp.ok:
            msg = payload.get("error") if isinstance(payload, dict) else None
            raise RelayError(msg or "Failed to send message", status_code=resp.status_code)
        if not isinstance(payload, dict) or not payload.get("success") or not isinstance(payload.get("data"), dict):
            raise RelayError("Relay returned an unexpected response", status_code=resp.status_code)
        return payload["data"]
