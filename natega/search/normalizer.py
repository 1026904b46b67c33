"""Canonical Arabic name normalization.

Used at both index time (ingestion) and query time (search), so the two
sides of every comparison are always folded by the same rules.

The pipeline, in order:

1. Remove diacritics (U+064B..U+065F).
2. Remove tatweel (U+0640).
3. Fold alif with hamza/madda to plain alif.
4. Fold hamza carriers and standalone hamza to bare hamza.
5. Fold ta marbuta to ha.
6. Fold alif maqsura to ya.
7. Drop everything outside U+0621..U+063A, U+0640..U+0652 and plain space.
8. Collapse runs of spaces.
9. Trim.

Steps 1-7 act on single code points, so they are composed into one
translation table built once at import. Steps 8-9 then
run as one split/join, since only plain spaces survive step 7.
"""

DIACRITICS_RANGE = (0x064B, 0x065F)

TATWEEL = "\u0640"  # ـ

ALIF = "\u0627"
HAMZA = "\u0621"
HA = "\u0647"
YA = "\u064a"

# Steps 3-6, in order. Each maps a set of letters to one canonical letter.
LETTER_FOLDS: tuple[tuple[str, str], ...] = (
    ("\u0623\u0625\u0622", ALIF),  # أ إ آ -> ا
    ("\u0624\u0626\u0621", HAMZA),  # ؤ ئ ء -> ء
    ("\u0629", HA),  # ة -> ه
    ("\u0649", YA),  # ى -> ي
)

ALLOWED_RANGES: tuple[tuple[int, int], ...] = (
    (0x0621, 0x063A),
    (0x0640, 0x0652),
)


def _is_allowed(ch: str) -> bool:
    if ch == " ":
        return True
    cp = ord(ch)
    return any(lo <= cp <= hi for lo, hi in ALLOWED_RANGES)


def fold_char(ch: str) -> str:
    """Apply steps 1-7 to a single code point.

    Returns the canonical replacement, or "" when the character is dropped.
    """
    lo, hi = DIACRITICS_RANGE
    if lo <= ord(ch) <= hi or ch == TATWEEL:
        return ""
    for variants, target in LETTER_FOLDS:
        if ch in variants:
            ch = target
    return ch if _is_allowed(ch) else ""


# Highest code point the table covers. Every allowed letter lies below it,
# so anything above folds to nothing.
TABLE_CEILING = 0x06FF


class _FoldTable(dict):
    """str.translate table precomputed for U+0000..U+06FF."""

    def __missing__(self, cp: int) -> None:
        return None


_TABLE = _FoldTable(
    (cp, fold_char(chr(cp)) or None) for cp in range(TABLE_CEILING + 1)
)


def normalize_arabic_name(text: str | None) -> str:
    """Map raw display text to its canonical comparison form.

    Total and pure: never raises, and ``None`` normalizes to "".
    Idempotent: normalizing the output again returns it unchanged.
    """
    if not text:
        return ""
    return " ".join(text.translate(_TABLE).split())
