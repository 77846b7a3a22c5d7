"""Recovery parsing: text normalization and the strategy ladder."""

from .normalizer import normalize_escapes
from .parser import JsonRecoveryParser, RecoveryDiagnostics
from .strategies import RecoveryContext, StrategySpec, default_strategies

__all__ = [
    "JsonRecoveryParser",
    "RecoveryContext",
    "RecoveryDiagnostics",
    "StrategySpec",
    "default_strategies",
    "normalize_escapes",
]
