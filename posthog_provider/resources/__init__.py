"""Resource adapters for posthog-provider."""

# Import all resources to register them
from posthog_provider.resources.action import ActionModel, ActionResource
from posthog_provider.resources.base import Resource, get_resource_registry, register_resource
from posthog_provider.resources.project import ProjectModel, ProjectResource

__all__ = [
    "Resource",
    "register_resource",
    "get_resource_registry",
    "ActionModel",
    "ActionResource",
    "ProjectModel",
    "ProjectResource",
]
