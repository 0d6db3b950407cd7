"""HTTP client for the background-agents API."""

from __future__ import annotations

import json
import urllib.error
import urllib.parse
import urllib.request

from .debuglog import debug_log
from .errors import DecodeFailure, RemoteFailure, TransportFailure, ValidationFailure
from .models import (
    Agent,
    AgentPage,
    Conversation,
    KeyInfo,
    agent_from_dict,
    agent_page_from_dict,
    conversation_from_dict,
    key_info_from_dict,
)
from .settings import SETTINGS

_ERROR_BODY_LIMIT = 500


class AgentClient:
    """Blocking client; every call raises an ``AgentwatchError`` on failure."""

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = (base_url or SETTINGS.api.base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else SETTINGS.api.timeout

    def _request(self, method: str, endpoint: str, body: dict | None = None) -> object:
        url = f"{self.base_url}{endpoint}"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "User-Agent": "agentwatch",
        }
        data: bytes | None = None
        if body is not None:
            data = json.dumps(body).encode()
            headers["Content-Type"] = "application/json"

        req = urllib.request.Request(url, data=data, method=method, headers=headers)
        debug_log(f"{method} {url}")
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                raw: str = response.read().decode(errors="replace")
        except urllib.error.HTTPError as e:
            err_body: str = e.read(_ERROR_BODY_LIMIT).decode(errors="replace")
            debug_log(f"HTTPError {e.code} from {url}: {err_body}")
            raise RemoteFailure(
                f"API request failed with status {e.code}: {err_body}",
                status_code=e.code,
            ) from e
        except (urllib.error.URLError, TimeoutError, OSError) as e:
            debug_log(f"request failed for {url}: {type(e).__name__}: {e}")
            reason = getattr(e, "reason", None) or e
            raise TransportFailure(f"error making request: {reason}") from e

        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            debug_log(f"undecodable body from {url}: {raw[:200]!r}")
            raise DecodeFailure(f"error decoding response: {e}") from e

    @staticmethod
    def _agent_path(agent_id: str, suffix: str = "") -> str:
        if not agent_id or not agent_id.strip():
            raise ValidationFailure("agent id must not be empty")
        return f"/agents/{urllib.parse.quote(agent_id.strip(), safe='')}{suffix}"

    def list_agents(self, limit: int = 0, cursor: str = "") -> AgentPage:
        """Fetch one page of agents."""
        params: dict[str, str] = {}
        if limit > 0:
            params["limit"] = str(limit)
        if cursor:
            params["cursor"] = cursor
        endpoint = "/agents"
        if params:
            endpoint += "?" + urllib.parse.urlencode(params)
        return agent_page_from_dict(self._request("GET", endpoint))

    def get_agent(self, agent_id: str) -> Agent:
        return agent_from_dict(self._request("GET", self._agent_path(agent_id)))

    def get_conversation(self, agent_id: str) -> Conversation:
        return conversation_from_dict(
            self._request("GET", self._agent_path(agent_id, "/conversation"))
        )

    def send_followup(self, agent_id: str, text: str) -> str:
        """Send a follow-up instruction; returns the acknowledgement id."""
        if not text.strip():
            raise ValidationFailure("follow-up text must not be empty")
        result = self._request(
            "POST",
            self._agent_path(agent_id, "/followup"),
            {"prompt": {"text": text}},
        )
        if not isinstance(result, dict):
            raise DecodeFailure("expected follow-up acknowledgement object")
        return str(result.get("id") or "")

    def get_key_info(self) -> KeyInfo:
        return key_info_from_dict(self._request("GET", "/me"))
