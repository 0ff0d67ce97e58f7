"""Latest-policy descriptor retrieval."""
from __future__ import annotations

import logging

import requests
from pydantic import ValidationError

from ..domain.models import PolicyDescriptor
from ..errors import FetchError

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {
    "Pragma": "no-cache",
    "Cache-Control": "no-cache, no-store",
    "Accept": "application/json",
}


class PolicyDescriptorFetcher:
    """Fetch the latest policy versions with a single uncached GET.

    The HTTP session is supplied by the host, together with whatever timeout
    and adapter configuration it carries. Nothing is retried or cached here.
    """

    def __init__(self, http: requests.Session) -> None:
        self.http = http

    def fetch(self, url: str) -> PolicyDescriptor:
        try:
            response = self.http.get(url, headers=NO_CACHE_HEADERS)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise FetchError(url, f"request failed ({exc})") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError(url, "response is not valid JSON") from exc

        if not isinstance(payload, dict):
            raise FetchError(url, "response is not a JSON object")

        try:
            descriptor = PolicyDescriptor.model_validate(payload)
        except ValidationError as exc:
            raise FetchError(url, "'tos' and 'privacy' must be present as strings") from exc

        logger.debug(
            "Latest policies: tos=%s privacy=%s",
            descriptor.tos_version,
            descriptor.privacy_version,
        )
        return descriptor
