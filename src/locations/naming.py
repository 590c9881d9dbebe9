"""Location name normalization for path labels.

A label is one segment of a location path and must match [a-z0-9_]+.
Display names are arbitrary Unicode, so they are transliterated to ASCII
first. Deterministic and idempotent.

    normalize_name("Garaż Metalowy")  -> "garaz_metalowy"
    normalize_name("Półka #1")        -> "polka_1"
    normalize_name("Top-Left Corner!") -> "top_left_corner"
    normalize_name("!!!")             -> ""
"""

import re
import unicodedata

# Letters that carry a diacritic but have no Unicode decomposition, so NFKD
# alone would drop them. Polish letters are listed explicitly as well.
_TRANSLITERATION = str.maketrans({
    # Polish
    "ą": "a", "ć": "c", "ę": "e", "ł": "l", "ń": "n",
    "ó": "o", "ś": "s", "ź": "z", "ż": "z",
    "Ą": "A", "Ć": "C", "Ę": "E", "Ł": "L", "Ń": "N",
    "Ó": "O", "Ś": "S", "Ź": "Z", "Ż": "Z",
    # Stroked letters and ligatures
    "đ": "d", "Đ": "D", "ø": "o", "Ø": "O", "ħ": "h", "Ħ": "H",
    "ı": "i", "ŧ": "t", "Ŧ": "T", "ð": "d", "Ð": "D",
    "æ": "ae", "Æ": "AE", "œ": "oe", "Œ": "OE", "ß": "ss",
    "ẞ": "SS", "þ": "th", "Þ": "TH",
})

# Longest label kept; ltree allows at most 256 characters per label.
LABEL_MAX_LENGTH = 255

_NON_LABEL_RUN = re.compile(r"[^a-z0-9_]+")
_UNDERSCORE_RUN = re.compile(r"_+")


def transliterate(text: str) -> str:
    """Map extended Latin letters to their closest ASCII form.

    Case is preserved. Characters outside Latin script pass through unchanged
    (combining marks are removed).
    """
    text = text.translate(_TRANSLITERATION)
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def normalize_name(raw: str) -> str:
    """Turn a display name into a path label.

    Some letters expand when transliterated ("ß" -> "ss"), so the label is
    cut to LABEL_MAX_LENGTH. Returns "" when nothing label-safe remains;
    callers must reject that before building a path.
    """
    label = transliterate(raw).lower()
    label = _NON_LABEL_RUN.sub("_", label)
    label = _UNDERSCORE_RUN.sub("_", label)
    return label.strip("_")[:LABEL_MAX_LENGTH].rstrip("_")
