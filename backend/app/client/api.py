"""HTTP client for the Couple Resolve backend."""
import logging
from typing import Any, Optional

import httpx
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.models import SessionResponse

logger = logging.getLogger(__name__)


class ClientSettings(BaseSettings):
    """Client settings loaded from COUPLE_RESOLVE_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="COUPLE_RESOLVE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_base_url: str = "http://localhost:8000"
    poll_interval_seconds: float = 3.0
    request_timeout_seconds: float = 30.0
    session_code_attempts: int = 5


class ApiError(Exception):
    """A non-2xx response from the backend, carrying its error message."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return response.reason_phrase


class ApiClient:
    """Thin async wrapper around the session and solution endpoints."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(
        cls,
        settings: ClientSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ApiClient":
        return cls(settings.api_base_url, timeout=settings.request_timeout_seconds, transport=transport)

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        response = await self._client.request(method, path, json=json)
        if response.is_error:
            message = _error_message(response)
            logger.debug("%s %s failed with %d: %s", method, path, response.status_code, message)
            raise ApiError(response.status_code, message)
        return response.json()

    async def create_session(
        self,
        session_code: Optional[str],
        perspective: str,
        name: Optional[str] = None,
    ) -> SessionResponse:
        body = {
            "session_code": session_code,
            "partner1_name": name,
            "partner1_perspective": perspective,
        }
        return SessionResponse.model_validate(await self._request("POST", "/api/sessions", body))

    async def get_session(self, session_code: str) -> SessionResponse:
        return SessionResponse.model_validate(await self._request("GET", f"/api/sessions/{session_code}"))

    async def join_session(
        self,
        session_code: str,
        perspective: str,
        name: Optional[str] = None,
    ) -> SessionResponse:
        body = {"partner2_name": name, "partner2_perspective": perspective}
        data = await self._request("POST", f"/api/sessions/{session_code}/join", body)
        return SessionResponse.model_validate(data)

    async def generate_solution(self, session_code: str) -> str:
        data = await self._request("POST", "/api/generate-solution", {"sessionCode": session_code})
        return data["solution"]
