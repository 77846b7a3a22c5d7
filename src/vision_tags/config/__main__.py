"""CLI entry point for configuration introspection.

Usage:
    python -m vision_tags.config
    python -m vision_tags.config --check
    python -m vision_tags.config --json
"""

from .introspection import main

if __name__ == "__main__":
    main()
