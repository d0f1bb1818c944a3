"""Exception hierarchy for posthog-provider."""

from __future__ import annotations


class PostHogProviderError(Exception):
    """Base class for every error raised by posthog-provider."""


class TransportError(PostHogProviderError):
    """The HTTP request could not be completed (connection, timeout...)."""


class EncodingError(PostHogProviderError):
    """A request body could not be encoded, or a response body decoded."""


class APIError(PostHogProviderError):
    """The API answered with an unexpected HTTP status code."""

    def __init__(self, method: str, url: str, status_code: int, expected_status: int, body: str):
        self.method = method
        self.url = url
        self.status_code = status_code
        self.expected_status = expected_status
        self.body = body
        super().__init__(
            f"unexpected HTTP status code for {method} {url}, expected {expected_status}, "
            f"got {status_code} (server response: {body})"
        )


class ValidationError(PostHogProviderError):
    """Invalid user input, detected before any request is sent.

    ``attribute`` names the configuration attribute the problem belongs to,
    when it is known.
    """

    def __init__(self, summary: str, detail: str, attribute: str | None = None):
        self.summary = summary
        self.detail = detail
        self.attribute = attribute
        super().__init__(f"{summary}: {detail}")

    def to_dict(self) -> dict:
        d = {"summary": self.summary, "detail": self.detail}
        if self.attribute:
            d["attribute"] = self.attribute
        return d


class InvalidIDError(ValidationError):
    """An identifier string is not a valid unsigned 64-bit decimal number."""


class ConfigurationError(ValidationError):
    """The provider configuration is incomplete."""
