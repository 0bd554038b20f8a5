"""Heuristic metadata extraction from hosting-page text."""

from __future__ import annotations

from .heuristics import (
    LANGUAGE_VOCABULARY,
    display_quality,
    format_byte_size,
    guess_meta,
    merge_meta,
)

__all__ = [
    "LANGUAGE_VOCABULARY",
    "display_quality",
    "format_byte_size",
    "guess_meta",
    "merge_meta",
]
