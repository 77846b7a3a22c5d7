"""Result assembly: envelope resolution, recovery and fallback."""

from .assembler import ResultAssembler, assemble
from .envelope import CANDIDATE_TEXT_FIELDS, ResolvedInput, resolve_input
from .fallback import PlainTextFallback

__all__ = [
    "CANDIDATE_TEXT_FIELDS",
    "PlainTextFallback",
    "ResolvedInput",
    "ResultAssembler",
    "assemble",
    "resolve_input",
]
