from __future__ import annotations

import uuid
from typing import Any, Dict, Optional, Tuple

import httpx
from loguru import logger

from .config import (
    ACCEPT_HEADER,
    ACCEPT_LANGUAGE_HEADER,
    PruneSettings,
)


class TransportError(RuntimeError):
    """Request never produced a response (connection reset, DNS, ...)."""


class TransportTimeout(TransportError):
    """Request exceeded the process-wide timeout. Aborts the run."""


def build_headers(settings: PruneSettings, purpose: str) -> Dict[str, str]:
    """
    Header set for one of: fetch, graphql, delete, verify.

    httpx fills in Host, Content-Length, Connection and Accept-Encoding
    itself; Accept-Encoding only lists the codecs it can decode.
    """
    headers = {
        "Cookie": settings.cookie,
        "x-amzn-alexa-app": settings.alexa_app,
        "Accept": ACCEPT_HEADER,
        "User-Agent": settings.user_agent,
    }
    if purpose == "fetch":
        headers["Routines-Version"] = settings.routines_version
    elif purpose in ("graphql", "delete"):
        headers["csrf"] = settings.csrf
        headers["Accept-Language"] = ACCEPT_LANGUAGE_HEADER
    elif purpose != "verify":
        raise ValueError(f"Unknown request purpose: {purpose!r}")

    if purpose != "fetch":
        headers["x-amzn-RequestId"] = str(uuid.uuid4())
    return headers


def _http_client(settings: PruneSettings) -> httpx.Client:
    return httpx.Client(
        timeout=httpx.Timeout(settings.request_timeout),
        follow_redirects=False,
    )


class AlexaTransport:
    """
    The single outbound client for a run. Not thread-safe; one request
    in flight at a time.
    """

    def __init__(self, settings: PruneSettings, client: Optional[httpx.Client] = None):
        self.settings = settings
        self._client = client if client is not None else _http_client(settings)

    def send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        json_body: Optional[Any] = None,
    ) -> Tuple[int, str]:
        try:
            r = self._client.request(method, url, headers=headers, json=json_body)
        except httpx.TimeoutException as e:
            raise TransportTimeout(f"{method} {url} timed out after {self.settings.request_timeout}s") from e
        except httpx.TransportError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        logger.debug("{} {} -> HTTP {}", method, url, r.status_code)
        return r.status_code, r.text

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "AlexaTransport":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
