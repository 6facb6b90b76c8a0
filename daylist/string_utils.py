"""
Shared string normalization helpers.

Artist and album names arrive from the library with inconsistent typography,
accents and casing; every comparison in the engine goes through these keys so
that "Beyoncé" and "Beyonce" count as the same artist for repeat windows.
"""
import unicodedata
from typing import Optional

# Typography variants folded to their ASCII equivalents
_TYPOGRAPHY_TRANSLATION = {
    ord("‘"): "'",
    ord("’"): "'",
    ord("‚"): "'",
    ord("′"): "'",
    ord("“"): '"',
    ord("”"): '"',
    ord("„"): '"',
    ord("″"): '"',
    ord("‐"): "-",
    ord("‑"): "-",
    ord("‒"): "-",
    ord("–"): "-",
    ord("—"): "-",
    ord("−"): "-",
}


def normalize_text(text: Optional[str], lowercase: bool = True, strip: bool = True) -> str:
    """
    Normalize text for consistent comparisons.

    Applies Unicode NFC composition, optional case folding and whitespace
    stripping. None becomes the empty string.

    Args:
        text: Text to normalize
        lowercase: Apply case folding
        strip: Remove leading/trailing whitespace

    Returns:
        Normalized text string
    """
    if text is None:
        return ""

    text = unicodedata.normalize("NFC", str(text))
    if lowercase:
        text = text.casefold()
    if strip:
        text = text.strip()
    return text


def collapse_whitespace(text: str) -> str:
    """Collapse internal whitespace runs to single spaces."""
    return " ".join(text.split())


def normalize_key(name: Optional[str]) -> str:
    """
    Normalize an artist or album name to a stable comparison key.

    Steps:
    - Fold typography variants (curly quotes, dashes)
    - Unicode NFKD and drop combining marks
    - Casefold
    - Replace punctuation with spaces and collapse whitespace

    Punctuation-only names ("!!!") keep their punctuation so they still
    produce a non-empty key.
    """
    if not name:
        return ""

    text = str(name).strip()
    if not text:
        return ""

    text = text.translate(_TYPOGRAPHY_TRANSLATION)
    text = unicodedata.normalize("NFKD", text)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = text.casefold()

    stripped = "".join(
        " " if unicodedata.category(ch).startswith("P") else ch for ch in text
    )
    key = collapse_whitespace(stripped)
    return key or collapse_whitespace(text)


def title_case(text: str) -> str:
    """Capitalize the first letter of each word and lowercase the rest."""
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split())
