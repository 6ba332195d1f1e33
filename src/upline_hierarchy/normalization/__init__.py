from __future__ import annotations

from .identifiers import (
    clean_text,
    normalize,
    normalize_digits,
    normalize_email,
    normalize_text,
)

__all__ = [
    "clean_text",
    "normalize",
    "normalize_digits",
    "normalize_email",
    "normalize_text",
]
