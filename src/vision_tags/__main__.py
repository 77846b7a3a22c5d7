"""Command line entry point: recover tags from a saved model response.

Usage:
    python -m vision_tags response.txt
    python -m vision_tags --json-input envelope.json --diagnostics
    cat response.txt | python -m vision_tags
"""

import argparse
import json
import logging
import sys
from typing import Any

from vision_tags.config import load_recovery_config
from vision_tags.exceptions import VisionTagsError
from vision_tags.pipeline.assembler import ResultAssembler

# ruff: noqa: T201


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Recover caption and object tags from vision-model output",
        prog="python -m vision_tags",
    )
    parser.add_argument(
        "file",
        nargs="?",
        help="File holding the model output (reads stdin when omitted)",
    )
    parser.add_argument(
        "--json-input",
        action="store_true",
        help="Treat the input as a JSON response envelope instead of plain text",
    )
    parser.add_argument(
        "--diagnostics",
        action="store_true",
        help="Include the recovery method and diagnostics in the output",
    )
    parser.add_argument(
        "--include-raw",
        action="store_true",
        help="Echo the raw input in successful results",
    )
    parser.add_argument(
        "--max-objects",
        type=int,
        help="Override the fallback object cap",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log recovery decisions"
    )
    return parser


def _read_input(path: str | None) -> str:
    if path is None or path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return the process exit code."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    overrides: dict[str, Any] = {}
    if args.diagnostics:
        overrides["enable_diagnostics"] = True
    if args.include_raw:
        overrides["include_raw"] = True
    if args.max_objects is not None:
        overrides["fallback_max_objects"] = args.max_objects

    try:
        config = load_recovery_config(overrides)
        text = _read_input(args.file)
    except (OSError, ValueError, VisionTagsError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    raw: Any = text
    if args.json_input:
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            print(f"error: input is not valid JSON: {e}", file=sys.stderr)
            return 2

    assembler = ResultAssembler(config)
    result = assembler.assemble(raw)
    output = json.dumps(assembler.to_response(result), ensure_ascii=False, indent=2)
    # Lone surrogates in model text cannot be encoded; print them as escapes
    print(output.encode("utf-8", errors="backslashreplace").decode("utf-8"))
    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
