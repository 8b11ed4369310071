"""Outbound HTTP client shared by the provider calls of a single request."""
from typing import Iterator

import httpx

from config import Config


def get_http_client() -> Iterator[httpx.Client]:
    """FastAPI dependency yielding a client bounded by UPSTREAM_TIMEOUT_SECONDS."""
    with httpx.Client(
        timeout=Config.UPSTREAM_TIMEOUT_SECONDS,
        follow_redirects=True,
        headers={"User-Agent": Config.UPSTREAM_USER_AGENT},
    ) as client:
        yield client
