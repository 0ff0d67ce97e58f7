"""External terms-and-conditions required action.

The provider wires the descriptor fetcher, the acceptance comparison, the
challenge builder and the action processor into the host's required-action
lifecycle:

    evaluate_triggers -> required_action_challenge -> (user submits) -> process_action

Everything learned during one interaction (the status and the freshly
fetched descriptor) lives on the ``RequiredActionContext`` the host creates
for that interaction. The provider itself only holds immutable configuration
and the collaborators handed to it at construction time, so one instance can
serve concurrent requests.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol

import requests

from ..config import GateConfig, load_config
from ..domain.models import (
    PROVIDER_ID,
    ActionOutcome,
    PolicyDescriptor,
    RequiredActionStatus,
    UserAccount,
)
from ..domain.policy import build_challenge, needs_action
from ..errors import ConfigurationError, FetchError, InvalidTransitionError
from .fetcher import PolicyDescriptorFetcher
from .identity import IdentityStore
from .processor import ActionProcessor, FormSubmission

logger = logging.getLogger(__name__)

TERMS_TEMPLATE = "terms.html"


class ChallengeRenderer(Protocol):
    def render(self, template: str, attributes: Mapping[str, Any]) -> Any:
        ...


@dataclass
class RequiredActionContext:
    """Per-interaction state handed to every lifecycle hook."""

    user: UserAccount
    identity: IdentityStore
    renderer: Optional[ChallengeRenderer] = None
    form: Optional[FormSubmission] = None
    status: RequiredActionStatus = RequiredActionStatus.IDLE
    descriptor: Optional[PolicyDescriptor] = None
    challenge_response: Any = None
    outcome: Optional[ActionOutcome] = None
    errors: list[str] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.status is RequiredActionStatus.FAILED

    def failure(self, message: str) -> None:
        self.status = RequiredActionStatus.FAILED
        self.errors.append(message)

    def challenge(self, response: Any) -> None:
        self.challenge_response = response
        self.status = RequiredActionStatus.AWAITING_SUBMISSION

    def success(self, outcome: ActionOutcome) -> None:
        # The gate is satisfied (or superseded by account deletion) either way.
        self.identity.remove_required_action(self.user.id, PROVIDER_ID)
        self.outcome = outcome
        if outcome is ActionOutcome.CANCELLED_TO_DELETION:
            self.status = RequiredActionStatus.REDIRECTED
        else:
            self.status = RequiredActionStatus.COMPLETED


_EVALUATE_FROM = {
    RequiredActionStatus.IDLE,
    RequiredActionStatus.SATISFIED,
    RequiredActionStatus.TRIGGERED,
    RequiredActionStatus.COMPLETED,
    RequiredActionStatus.REDIRECTED,
}
_CHALLENGE_FROM = {
    RequiredActionStatus.IDLE,
    RequiredActionStatus.SATISFIED,
    RequiredActionStatus.TRIGGERED,
    RequiredActionStatus.AWAITING_SUBMISSION,
}
_PROCESS_FROM = {
    RequiredActionStatus.IDLE,
    RequiredActionStatus.SATISFIED,
    RequiredActionStatus.TRIGGERED,
    RequiredActionStatus.AWAITING_SUBMISSION,
}


def _require(context: RequiredActionContext, allowed: set, hook: str) -> None:
    if context.status not in allowed:
        raise InvalidTransitionError(f"{hook} is not allowed from state {context.status.value}")


class ExternalTermsProvider:
    """Required action that gates sessions on the latest published policies."""

    provider_id = PROVIDER_ID
    display_text = "External Terms and Conditions"

    def __init__(self, http: requests.Session) -> None:
        self.fetcher = PolicyDescriptorFetcher(http)
        self._config: Optional[GateConfig] = None

    @property
    def config(self) -> GateConfig:
        if self._config is None:
            raise ConfigurationError("Provider used before init()")
        return self._config

    def init(self, config: Optional[GateConfig] = None) -> None:
        logger.debug("Initializing ExternalTermsAndConditions Required Action")
        if config is None:
            config = load_config()
        if not config.latest_policies_url or not config.policies_base_url:
            logger.error("Missing required configuration")
            raise ConfigurationError("Missing required configuration")
        self._config = config

    def evaluate_triggers(self, context: RequiredActionContext) -> RequiredActionStatus:
        _require(context, _EVALUATE_FROM, "evaluate_triggers")
        context.status = RequiredActionStatus.FETCHING
        context.descriptor = None
        try:
            descriptor = self.fetcher.fetch(self.config.latest_policies_url)
        except FetchError:
            logger.exception("Failed to fetch latest policies")
            context.failure("Unable to verify policy acceptance")
            return context.status

        record = context.identity.acceptance_record(context.user.id)
        logger.debug("Current accepted terms: %s", record.accepted_tos_version)
        logger.debug("Latest terms: %s", descriptor.tos_version)
        logger.debug("Current accepted privacy: %s", record.accepted_privacy_version)
        logger.debug("Latest privacy: %s", descriptor.privacy_version)

        context.descriptor = descriptor
        if not needs_action(descriptor, record):
            logger.debug("User has already accepted the latest terms and conditions")
            context.status = RequiredActionStatus.SATISFIED
            return context.status

        logger.debug("User has not accepted the latest terms and conditions")
        context.identity.add_required_action(context.user.id, PROVIDER_ID)
        context.status = RequiredActionStatus.TRIGGERED
        return context.status

    def required_action_challenge(self, context: RequiredActionContext) -> Any:
        """Render the accept / cancel form for this interaction.

        An interaction that has not fetched the latest policies yet does so
        first. Returns ``None`` when there is nothing to challenge (fetch
        failed or the user is already up to date).
        """
        _require(context, _CHALLENGE_FROM, "required_action_challenge")
        if context.renderer is None:
            raise InvalidTransitionError("required_action_challenge needs a renderer on the context")
        if context.status is RequiredActionStatus.SATISFIED:
            return None
        if context.descriptor is None:
            status = self.evaluate_triggers(context)
            if status is not RequiredActionStatus.TRIGGERED:
                return None

        context.status = RequiredActionStatus.CHALLENGING
        challenge = build_challenge(self.config.policies_base_url, context.descriptor)
        attributes = {"user": context.user, **challenge.form_attributes()}
        response = context.renderer.render(TERMS_TEMPLATE, attributes)
        context.challenge(response)
        return response

    def process_action(self, context: RequiredActionContext) -> ActionOutcome:
        _require(context, _PROCESS_FROM, "process_action")
        submission = context.form or FormSubmission()
        outcome = ActionProcessor(context.identity).apply(submission, context.user)
        context.success(outcome)
        logger.info("User %s finished %s with outcome %s", context.user.id, PROVIDER_ID, outcome.value)
        return outcome

    def close(self) -> None:
        pass
