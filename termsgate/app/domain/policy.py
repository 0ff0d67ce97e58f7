"""Acceptance comparison and challenge construction."""
import re

from ..errors import FormattingError
from .models import ChallengeContext, PolicyDescriptor, PolicyType, UserAcceptanceRecord

# %1$s (explicit index), %s (next argument) or %% (literal percent)
_SLOT = re.compile(r"%(?:(\d+)\$)?(.)|%$")


def needs_action(descriptor: PolicyDescriptor, record: UserAcceptanceRecord) -> bool:
    """Return True unless the user accepted exactly the latest versions.

    Versions are opaque tokens compared as exact strings. A missing value on
    either side never matches, not even another missing value.
    """
    return not (
        _accepted(record.accepted_tos_version, descriptor.tos_version)
        and _accepted(record.accepted_privacy_version, descriptor.privacy_version)
    )


def _accepted(accepted, latest) -> bool:
    if accepted is None or latest is None:
        return False
    return accepted == latest


def format_policy_url(template: str, policy_type: str, version: str) -> str:
    """Fill a printf-style policy URL template.

    ``%1$s`` is the policy type and ``%2$s`` the version, e.g.
    ``https://mysite.com/policy/%1$s/%1$s.%2$s.html``.
    """
    args = (policy_type, version)
    position = 0

    def substitute(match: re.Match) -> str:
        nonlocal position
        index, conversion = match.group(1), match.group(2)
        if conversion is None:
            raise FormattingError(f"Dangling '%' in policy URL template {template!r}")
        if conversion == "%" and index is None:
            return "%"
        if conversion != "s":
            raise FormattingError(
                f"Unsupported conversion '%{conversion}' in policy URL template {template!r}"
            )
        if index is None:
            slot = position
            position += 1
        else:
            slot = int(index) - 1
        if not 0 <= slot < len(args):
            raise FormattingError(f"Policy URL template {template!r} references a missing argument")
        return args[slot]

    return _SLOT.sub(substitute, template)


def build_challenge(base_url_template: str, descriptor: PolicyDescriptor) -> ChallengeContext:
    """Resolve both policy links for the latest descriptor."""
    return ChallengeContext(
        tos_url=format_policy_url(base_url_template, PolicyType.TOS.value, descriptor.tos_version),
        privacy_url=format_policy_url(
            base_url_template, PolicyType.PRIVACY.value, descriptor.privacy_version
        ),
        tos_version=descriptor.tos_version,
        privacy_version=descriptor.privacy_version,
    )
