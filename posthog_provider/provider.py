"""Provider configuration and bootstrap."""

from __future__ import annotations

import os
from dataclasses import dataclass

# Ensure all resources are registered by importing the resources package
import posthog_provider.resources  # noqa: F401
from posthog_provider.client import PostHogClient, Transport
from posthog_provider.errors import ConfigurationError
from posthog_provider.resources import Resource, get_resource_registry

HOST_ENV = "POSTHOG_HOST"
API_KEY_ENV = "POSTHOG_API_KEY"
TIMEOUT_ENV = "POSTHOG_TIMEOUT"


@dataclass
class ProviderConfig:
    """Provider-level settings.

    ``host`` is https://app.posthog.com for US customers, https://eu.posthog.com
    for EU customers, or the address of a self-hosted instance.
    """

    host: str | None = None
    api_key: str | None = None
    timeout: float | None = None

    def __repr__(self) -> str:
        return f"ProviderConfig(host={self.host!r}, api_key={'***' if self.api_key else None}, timeout={self.timeout!r})"

    @classmethod
    def from_env(cls, host: str | None = None, api_key: str | None = None) -> ProviderConfig:
        """Explicit values win over the environment."""
        timeout = os.environ.get(TIMEOUT_ENV)
        if timeout:
            try:
                parsed_timeout: float | None = float(timeout)
            except ValueError:
                raise ConfigurationError(
                    "Invalid PostHog timeout", f"{TIMEOUT_ENV}={timeout!r} is not a number", attribute="timeout"
                ) from None
        else:
            parsed_timeout = None
        return cls(
            host=host or os.environ.get(HOST_ENV),
            api_key=api_key or os.environ.get(API_KEY_ENV),
            timeout=parsed_timeout,
        )

    def validate(self) -> None:
        if not self.host:
            raise ConfigurationError(
                "Missing PostHog host",
                f"The host parameter is required for this provider to manage resources (set {HOST_ENV}).",
                attribute="host",
            )
        if not self.api_key:
            raise ConfigurationError(
                "Missing PostHog API key",
                f"The api_key parameter is required for this provider to manage resources (set {API_KEY_ENV}).",
                attribute="api_key",
            )


class Provider:
    """Builds the API client and hands it to every registered resource adapter."""

    def __init__(self, config: ProviderConfig, session: Transport | None = None):
        config.validate()
        self.config = config
        self.client = PostHogClient(config.host, config.api_key, session=session, timeout=config.timeout)
        self.resources: dict[str, Resource] = {
            name: resource_cls(self.client) for name, resource_cls in get_resource_registry().items()
        }

    def resource(self, type_name: str) -> Resource:
        try:
            return self.resources[type_name]
        except KeyError:
            raise ConfigurationError(
                "Unknown resource type", f"{type_name!r} is not one of {sorted(self.resources)}"
            ) from None
