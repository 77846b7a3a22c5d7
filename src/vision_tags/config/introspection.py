"""Configuration introspection utilities for debugging and validation.

This module prints the effective configuration, where each value came from,
and whether the configuration validates.
"""

import argparse
import json
import sys
from typing import Any

from .api import resolve_config
from .env_loader import EnvironmentConfigLoader

# ruff: noqa: T201


def check_config_validation() -> bool:
    """Return True if the configuration resolves and validates."""
    try:
        resolve_config()
    except Exception:
        return False
    return True


def get_config_info() -> dict[str, Any]:
    """Structured configuration information for programmatic use."""
    try:
        resolved = resolve_config()
    except Exception as e:
        return {"valid": False, "error": str(e)}

    values = resolved._asdict()
    origin = dict(values.pop("origin"))
    values["extra_blocked_names"] = list(values["extra_blocked_names"])
    return {
        "valid": True,
        "config": values,
        "sources": origin,
        "environment": EnvironmentConfigLoader().get_env_summary(),
    }


def print_config_debug(*, show_sources: bool = True) -> None:
    """Print the effective configuration, optionally with value origins."""
    try:
        resolved = resolve_config()
    except Exception as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        sys.exit(1)

    print("=== Effective Configuration ===")
    for field, value in resolved._asdict().items():
        if field != "origin":
            print(f"{field}: {value!r}")

    if show_sources:
        print("\n=== Configuration Sources ===")
        print(resolved.audit())


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for configuration introspection."""
    parser = argparse.ArgumentParser(
        description="Inspect vision-tags configuration",
        prog="python -m vision_tags.config",
    )
    parser.add_argument(
        "--no-sources", action="store_true", help="Don't show configuration sources"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON instead of human-readable format",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Just check if configuration is valid (exit code 0=valid, 1=invalid)",
    )

    args = parser.parse_args(argv)

    if args.check:
        sys.exit(0 if check_config_validation() else 1)

    if args.json:
        print(json.dumps(get_config_info(), indent=2, ensure_ascii=False))
    else:
        print_config_debug(show_sources=not args.no_sources)


if __name__ == "__main__":
    main()
