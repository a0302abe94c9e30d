from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

import httpx

from agent.core.models import ChatRecord, Location, NearbyPlace
from agent.core.personas import Persona
from config.settings import get_settings


class ChatApiError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:500] or response.reason_phrase
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.text[:500]


class ChatApiClient:
    """Thin wrapper over the chat HTTP API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url or get_settings().chat_api_url,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ChatApiClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise ChatApiError(f"Chat API call failed: {exc}") from exc
        if response.is_error:
            raise ChatApiError(_error_message(response), status_code=response.status_code)
        return response.json()

    def list_chats(self) -> List[ChatRecord]:
        return [ChatRecord.model_validate(item) for item in self._request("GET", "/api/chats")]

    def send_chat(
        self,
        message: str,
        location: Location,
        system_prompt: Optional[str] = None,
        persona: Optional[str] = None,
        places: Sequence[NearbyPlace] = (),
    ) -> ChatRecord:
        payload: Dict[str, Any] = {
            "message": message,
            "location": location.model_dump(exclude_none=True),
        }
        if system_prompt:
            payload["systemPrompt"] = system_prompt
        if persona:
            payload["persona"] = persona
        if places:
            payload["places"] = [p.model_dump(mode="json", exclude_none=True) for p in places]
        return ChatRecord.model_validate(self._request("POST", "/api/chat", json=payload))

    def clear_chats(self) -> int:
        return int(self._request("DELETE", "/api/chats").get("cleared", 0))

    def list_personas(self) -> List[Persona]:
        return [Persona.model_validate(item) for item in self._request("GET", "/api/personas")]
