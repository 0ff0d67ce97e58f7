"""Process-wide configuration, read once at provider initialisation."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# https://mysite.com/policy/latest.json
LATEST_POLICIES_URL_ENV = "EXTERNALTERMSANDCONDITIONS_LATEST_TERMS_URL"
# https://mysite.com/policy/%1$s/%1$s.%2$s.html (policy type, version)
POLICIES_BASE_URL_ENV = "EXTERNALTERMSANDCONDITIONS_POLICIES_BASE_URL"


@dataclass(frozen=True)
class GateConfig:
    latest_policies_url: str
    policies_base_url: str


def load_config(environ: Optional[Mapping[str, str]] = None) -> GateConfig:
    """Build the gate configuration from the environment.

    A `.env` file is honoured when reading the real process environment.
    Passing ``environ`` explicitly skips the `.env` lookup.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    latest_policies_url = (environ.get(LATEST_POLICIES_URL_ENV) or "").strip()
    policies_base_url = (environ.get(POLICIES_BASE_URL_ENV) or "").strip()

    missing = [
        name
        for name, value in (
            (LATEST_POLICIES_URL_ENV, latest_policies_url),
            (POLICIES_BASE_URL_ENV, policies_base_url),
        )
        if not value
    ]
    if missing:
        logger.error("Missing required configuration: %s", ", ".join(missing))
        raise ConfigurationError(f"Missing required configuration: {', '.join(missing)}")

    return GateConfig(
        latest_policies_url=latest_policies_url,
        policies_base_url=policies_base_url,
    )
