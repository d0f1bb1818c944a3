"""
posthog-provider: declare PostHog projects and actions, reconcile them against the API.

Each resource adapter translates between a declarative local model and the
PostHog REST API for create, read, update, delete and import.

Environment:
    POSTHOG_API_KEY - PostHog personal API key (required)
    POSTHOG_HOST    - PostHog instance URL (required)
"""

from posthog_provider.cli import main
from posthog_provider.client import PostHogClient
from posthog_provider.errors import (
    APIError,
    ConfigurationError,
    EncodingError,
    InvalidIDError,
    PostHogProviderError,
    TransportError,
    ValidationError,
)
from posthog_provider.models import ActionID, ProjectID, TextMatching
from posthog_provider.provider import Provider, ProviderConfig
from posthog_provider.resources import ActionModel, ActionResource, ProjectModel, ProjectResource

__version__ = "0.1.0"
__all__ = [
    "main",
    "__version__",
    "PostHogClient",
    "Provider",
    "ProviderConfig",
    "ActionResource",
    "ActionModel",
    "ProjectResource",
    "ProjectModel",
    "ProjectID",
    "ActionID",
    "TextMatching",
    "PostHogProviderError",
    "TransportError",
    "EncodingError",
    "APIError",
    "ValidationError",
    "InvalidIDError",
    "ConfigurationError",
]
