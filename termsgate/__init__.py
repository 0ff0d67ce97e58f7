"""
termsgate: a required-action gate that keeps user sessions behind the
currently published terms-of-service and privacy policy versions.

The latest versions live in an externally hosted JSON descriptor. Each
user carries the versions they last agreed to; when the two drift apart the
user is challenged with an accept / cancel form before the session may
proceed.
"""

__all__ = [
    "ExternalTermsProvider",
    "GateConfig",
    "PolicyDescriptor",
]

from .app.config import GateConfig
from .app.domain.models import PolicyDescriptor
from .app.services.required_action import ExternalTermsProvider

__version__ = "0.1.0"
