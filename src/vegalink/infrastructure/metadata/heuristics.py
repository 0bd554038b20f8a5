"""Best-effort size / quality / language extraction from free text.

Hosting pages present metadata however they like: in a ``<title>``, on a
button label, buried in a filename.  ``guess_meta`` scans any such text
with a fixed, priority-ordered rule list per field and never raises;
a field whose rules all miss stays empty (``Multi`` for language).

Known quirk: the last quality fallbacks look for the bare substrings
``1080``, ``720`` and ``480`` without word boundaries, so an incidental
digit run (a file id, a year-like number) can produce a false quality.
"""

from __future__ import annotations

import re

from vegalink.domain.entities.streams import UNKNOWN_LANGUAGE, MetaGuess

# --- Size ---

_SIZE_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(GiB|GB|MiB|MB)", re.IGNORECASE)

_GIB = 1024**3
_MIB = 1024**2

# --- Quality ---
# (pattern, fixed value). A fixed value of None means "use the captured digits".

_QUALITY_RULES: tuple[tuple[re.Pattern[str], str | None], ...] = (
    (re.compile(r"4k|uhd", re.IGNORECASE), "2160"),
    (re.compile(r"(?<!\d)(\d{3,4})p", re.IGNORECASE), None),
    (re.compile(r"2k", re.IGNORECASE), "1440"),
    (re.compile(r"1080"), "1080"),
    (re.compile(r"720"), "720"),
    (re.compile(r"480"), "480"),
)

# --- Language ---
# Spelling found in text -> canonical tag. Order only matters for display
# of the vocabulary; detection order follows the text.

LANGUAGE_VOCABULARY: tuple[tuple[str, str], ...] = (
    ("hindi", "Hindi"),
    ("english", "English"),
    ("eng", "English"),
    ("dual", "Dual"),
    ("multi", "Multi"),
    ("tamil", "Tamil"),
    ("telugu", "Telugu"),
    ("malayalam", "Malayalam"),
    ("kannada", "Kannada"),
)


# Spellings this short are abbreviations and only count as standalone words,
# so "eng" never fires inside "length"; longer ones also match joined-up
# tags such as "HindiEnglish" or "DualAudio".
_ABBREVIATION_MAX_LEN = 3


def _spelling_pattern(spelling: str) -> str:
    escaped = re.escape(spelling)
    if len(spelling) <= _ABBREVIATION_MAX_LEN:
        return rf"(?<![a-z]){escaped}(?![a-z])"
    return escaped


def _compile_language_re(vocabulary: tuple[tuple[str, str], ...]) -> re.Pattern[str]:
    # Longest spelling first so "english" wins over "eng".
    spellings = sorted({s for s, _ in vocabulary}, key=len, reverse=True)
    alternation = "|".join(_spelling_pattern(s) for s in spellings)
    return re.compile(rf"({alternation})", re.IGNORECASE)


_DEFAULT_LANGUAGE_RE = _compile_language_re(LANGUAGE_VOCABULARY)


# --- Public API ---


def guess_size(text: str) -> str:
    """Return ``"<number> GB|MB"`` for the first size in *text*, else ``""``.

    ``GiB``/``MiB`` spellings are folded into ``GB``/``MB``.
    """
    match = _SIZE_RE.search(text)
    if not match:
        return ""
    unit = match.group(2).upper().replace("IB", "B")
    return f"{match.group(1)} {unit}"


def guess_quality(text: str) -> str:
    """Return the bare vertical resolution (``"1080"``) or ``""``."""
    for pattern, fixed in _QUALITY_RULES:
        match = pattern.search(text)
        if match:
            return fixed if fixed is not None else match.group(1)
    return ""


def guess_language(
    text: str,
    vocabulary: tuple[tuple[str, str], ...] = LANGUAGE_VOCABULARY,
) -> str:
    """Dash-join distinct language tags in order of first appearance.

    Returns ``"Multi"`` when the vocabulary finds nothing.
    """
    if vocabulary is LANGUAGE_VOCABULARY:
        pattern = _DEFAULT_LANGUAGE_RE
    else:
        pattern = _compile_language_re(vocabulary)
    canonical = {spelling: tag for spelling, tag in vocabulary}

    tags: list[str] = []
    for match in pattern.finditer(text):
        tag = canonical[match.group(1).lower()]
        if tag not in tags:
            tags.append(tag)
    return "-".join(tags) if tags else UNKNOWN_LANGUAGE


def guess_meta(
    text: str | None,
    vocabulary: tuple[tuple[str, str], ...] = LANGUAGE_VOCABULARY,
) -> MetaGuess:
    """Scan arbitrary text for size, quality and language."""
    if not text:
        return MetaGuess()
    return MetaGuess(
        size=guess_size(text),
        quality=guess_quality(text),
        language=guess_language(text, vocabulary),
    )


def merge_meta(narrow: MetaGuess, broad: MetaGuess) -> MetaGuess:
    """Prefer the narrow (button-level) guess per field, else the broad one."""
    return MetaGuess(
        size=narrow.size or broad.size,
        quality=narrow.quality or broad.quality,
        language=(
            narrow.language
            if narrow.language and narrow.language != UNKNOWN_LANGUAGE
            else broad.language
        ),
    )


def display_quality(quality: str) -> str:
    """Render a stored bare quality for display (``"1080"`` -> ``"1080p"``)."""
    return f"{quality}p" if quality else ""


def format_byte_size(size_bytes: int | float | str | None) -> str:
    """Human-readable size: base-1024, two decimals, GB from 1 GiB upwards.

    Missing, non-numeric or non-positive sizes yield ``""``.
    """
    try:
        value = float(size_bytes)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return ""
    if value <= 0:
        return ""
    if value >= _GIB:
        return f"{value / _GIB:.2f} GB"
    return f"{value / _MIB:.2f} MB"
