"""Text normalization for matching boundary names across levels."""
import re
import unicodedata
from typing import Any

# Labels that normalize to this key never join a group
UNMATCHED_KEY = ""

_NON_ALNUM = re.compile(r"[\W_]")


def normalize_key(label: Any) -> str:
    """
    Normalize a boundary name into a grouping key.

    Compatibility-decomposes the text, case folds it and strips every
    character that is not alphanumeric (underscores included), so "Madhya Pradesh",
    "MADHYA-PRADESH" and "madhya_pradesh" all give the same key. Accents
    are removed along with the other separators once decomposed.

    Args:
        label: Raw name, usually a string; None and non-strings are accepted

    Returns:
        Normalized key, or UNMATCHED_KEY for empty or absent labels
    """
    if label is None:
        return UNMATCHED_KEY
    text = label if isinstance(label, str) else str(label)
    if not text:
        return UNMATCHED_KEY

    # NFKD again after case folding so the key is a fixed point
    text = unicodedata.normalize("NFKD", text)
    text = text.casefold()
    text = unicodedata.normalize("NFKD", text)

    return _NON_ALNUM.sub("", text)
