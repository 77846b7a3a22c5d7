"""Object sanitization: name policy and the sanitizer itself."""

from .sanitizer import ObjectSanitizer

__all__ = ["ObjectSanitizer"]
