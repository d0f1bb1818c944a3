"""CLI entry point for posthog-provider."""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from posthog_provider.errors import PostHogProviderError, ValidationError
from posthog_provider.logging_utils import setup_logging
from posthog_provider.provider import Provider, ProviderConfig
from posthog_provider.resources import Resource

RESOURCE_TYPES = {
    "project": "posthog_project",
    "action": "posthog_action",
}

OPERATIONS = ("create", "read", "update", "delete", "import")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="posthog-provider",
        description="Reconcile declared PostHog projects and actions against the PostHog API.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
    POSTHOG_API_KEY - Personal API key (required)
    POSTHOG_HOST    - PostHog instance URL (e.g. https://eu.posthog.com)
    POSTHOG_TIMEOUT - Request timeout in seconds (optional)

Examples:
    # Create a project from its declared state
    posthog-provider project create --file project.json

    # Refresh an action, prints null if it was deleted
    posthog-provider action read --id 42/7

    # Adopt an existing project
    posthog-provider project import --id 42
""",
    )
    parser.add_argument(
        "--host", default=None, help="PostHog instance URL (default: from POSTHOG_HOST env)"
    )
    parser.add_argument(
        "--json", action="store_true", dest="json_output", help="Output log lines as JSON (to stderr)"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("resource", choices=sorted(RESOURCE_TYPES), help="Resource type")
    parser.add_argument("operation", choices=OPERATIONS, help="Operation to perform")
    parser.add_argument("--file", default=None, help="JSON document with the declared state (create, update)")
    parser.add_argument(
        "--id",
        dest="import_id",
        default=None,
        help="Resource ID: PROJECT_ID for projects, PROJECT_ID/ACTION_ID for actions (read, delete, import)",
    )
    return parser


def load_model(resource: Resource, path: str | None) -> Any:
    if not path:
        raise ValidationError("Missing state file", "this operation needs --file", attribute="file")
    try:
        with open(path) as f:
            raw = json.load(f)
    except OSError as e:
        raise ValidationError("Cannot read state file", str(e), attribute="file") from e
    except ValueError as e:
        raise ValidationError("Invalid state file", f"{path}: {e}", attribute="file") from e
    return resource.model_from_dict(raw)


def require_id(import_id: str | None) -> str:
    if not import_id:
        raise ValidationError("Missing resource ID", "this operation needs --id", attribute="id")
    return import_id


def run(resource: Resource, args: argparse.Namespace) -> Any:
    """Run one operation and return the resulting model, or None when it is gone."""
    if args.operation == "create":
        return resource.create(load_model(resource, args.file))

    if args.operation == "update":
        return resource.update(load_model(resource, args.file))

    if args.operation in ("read", "import"):
        return resource.read(resource.import_state(require_id(args.import_id)))

    # delete
    if args.file:
        model = load_model(resource, args.file)
    else:
        # Soft deletes send the whole object back, so fetch it first
        model = resource.read(resource.import_state(require_id(args.import_id)))
        if model is None:
            return None
    resource.delete(model)
    return None


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logger = setup_logging(json_mode=args.json_output, verbose=args.verbose)

    try:
        provider = Provider(ProviderConfig.from_env(host=args.host))
        resource = provider.resource(RESOURCE_TYPES[args.resource])
        model = run(resource, args)
    except ValidationError as e:
        where = f" [{e.attribute}]" if e.attribute else ""
        logger.error(f"{e.summary}{where}: {e.detail}")
        return 1
    except PostHogProviderError as e:
        logger.error(f"Error during {args.resource} {args.operation}: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    state = resource.model_to_dict(model) if model is not None else None
    print(json.dumps(state, indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    sys.exit(main())
