"""Interpretation of submitted accept / cancel forms."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from ..domain.models import (
    DELETE_ACCOUNT_ACTION,
    FORM_CANCEL_FIELD,
    USER_PRIVACY_ATTRIBUTE,
    USER_TERMS_ATTRIBUTE,
    ActionOutcome,
    UserAccount,
)
from .identity import IdentityStore

logger = logging.getLogger(__name__)


@dataclass
class FormSubmission:
    """Decoded form fields; a field may repeat."""

    fields: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def from_items(cls, items: Iterable[Tuple[str, str]]) -> "FormSubmission":
        fields: Dict[str, List[str]] = {}
        for name, value in items:
            fields.setdefault(name, []).append(value)
        return cls(fields=fields)

    def __contains__(self, name: str) -> bool:
        return name in self.fields

    def first(self, name: str) -> Optional[str]:
        values = self.fields.get(name)
        return values[0] if values else None


class ActionProcessor:
    """Apply a user's response to the terms challenge."""

    def __init__(self, identity: IdentityStore) -> None:
        self.identity = identity

    def apply(self, submission: FormSubmission, user: UserAccount) -> ActionOutcome:
        # Prior acceptance never survives into the new decision.
        self.identity.remove_attribute(user.id, USER_TERMS_ATTRIBUTE)
        self.identity.remove_attribute(user.id, USER_PRIVACY_ATTRIBUTE)

        if FORM_CANCEL_FIELD in submission:
            logger.info("User %s declined the latest policies", user.id)
            self.identity.add_required_action(user.id, DELETE_ACCOUNT_ACTION)
            return ActionOutcome.CANCELLED_TO_DELETION

        accepted_tos = submission.first(USER_TERMS_ATTRIBUTE)
        accepted_privacy = submission.first(USER_PRIVACY_ATTRIBUTE)
        logger.debug("User accepted terms: %s", accepted_tos)
        logger.debug("User accepted privacy: %s", accepted_privacy)

        # Missing fields stay absent and re-trigger the gate later.
        if accepted_tos is not None:
            self.identity.set_attribute(user.id, USER_TERMS_ATTRIBUTE, accepted_tos)
        if accepted_privacy is not None:
            self.identity.set_attribute(user.id, USER_PRIVACY_ATTRIBUTE, accepted_privacy)
        return ActionOutcome.ACCEPTED
