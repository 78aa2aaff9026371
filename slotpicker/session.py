from __future__ import annotations

import logging
from typing import Callable, Mapping

import httpx

from slotpicker.config import Settings

logger = logging.getLogger(__name__)


def parse_cookie_header(raw: str | None) -> dict[str, str]:
    # "connect.sid=abc; theme=dark" -> {"connect.sid": "abc", "theme": "dark"}
    cookies: dict[str, str] = {}
    if not raw:
        return cookies

    for part in raw.split(";"):
        name, sep, value = part.strip().partition("=")
        if not sep or not name:
            continue
        cookies[name.strip()] = value.strip()
    return cookies


class SessionContext:
    """HTTP session of the requesting user.

    Carries the cookie credentials and the handler to call when the backend
    rejects them. The handler is passed in by whoever owns the session, so the
    HTTP layer has no module-level state.
    """

    def __init__(
        self,
        *,
        base_url: str,
        cookies: Mapping[str, str] | None = None,
        timeout_seconds: float = 20.0,
        on_unauthorized: Callable[[], None] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.on_unauthorized = on_unauthorized
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            cookies=dict(cookies or {}),
            timeout=timeout_seconds,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        on_unauthorized: Callable[[], None] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> SessionContext:
        return cls(
            base_url=settings.api_base_url,
            cookies=parse_cookie_header(settings.session_cookie),
            timeout_seconds=settings.request_timeout_seconds,
            on_unauthorized=on_unauthorized,
            transport=transport,
        )

    async def get(self, path: str, *, params: Mapping[str, str] | None = None) -> httpx.Response:
        response = await self._client.get(path, params=params)

        if response.status_code == 401:
            logger.warning("401 Unauthorized - clearing user session")
            self._client.cookies.clear()
            if self.on_unauthorized is not None:
                self.on_unauthorized()

        return response

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> SessionContext:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
