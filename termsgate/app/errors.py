"""Error taxonomy for the terms gate."""


class TermsGateError(Exception):
    """Base class for every error raised by termsgate."""


class ConfigurationError(TermsGateError):
    """Required configuration is missing; the provider cannot be used."""


class FetchError(TermsGateError):
    """The latest-policy descriptor could not be retrieved or decoded."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch latest policies from {url}: {reason}")
        self.url = url
        self.reason = reason


class FormattingError(TermsGateError):
    """The policy URL template is malformed."""


class InvalidTransitionError(TermsGateError):
    """A lifecycle hook was invoked from a state that does not allow it."""
