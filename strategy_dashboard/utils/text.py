"""Text normalization utilities shared by the dashboard pipeline.

All functions accept arbitrary cell values (None, numbers, strings) and
coerce them to text before inspecting them, so malformed spreadsheet
content degrades to an empty string instead of raising.
"""

# Words that stay upper-case when a label is title-cased for display
ACRONYMS = {
    "it": "IT",
    "nc": "NC",
    "ic": "IC",
    "pr": "PR",
    "hr": "HR",
    "ue": "UE",
}


def as_text(value) -> str:
    """Return the string form of a cell value ("" for None)."""
    if value is None:
        return ""
    return str(value)


def trim(value):
    """Strip surrounding whitespace from strings; pass other values through.

    None becomes "" so that blank cells compare equal to empty strings.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return value


def normalize_key(value) -> str:
    """Case-fold and trim a name for lookup equality.

    >>> normalize_key("  Education ")
    'education'
    """
    return as_text(value).strip().lower()


def split_values(value) -> list[str]:
    """Split a comma-separated cell into normalized, non-empty parts.

    "Health, Labour" -> ["health", "labour"]
    """
    parts = (normalize_key(p) for p in as_text(value).split(","))
    return [p for p in parts if p]


def title_case(value) -> str:
    """Title-case a label for display, keeping domain acronyms upper-case.

    "it STRATEGY" -> "IT Strategy"
    """
    words = []
    for word in as_text(value).split():
        lower = word.lower()
        if lower in ACRONYMS:
            words.append(ACRONYMS[lower])
        else:
            words.append(lower[:1].upper() + lower[1:])
    return " ".join(words)


def to_hex(color) -> str:
    """Prefix a color string with '#' when it lacks one.

    No further validation is performed: "FF0000" -> "#FF0000",
    "#00FF00" -> "#00FF00".
    """
    s = as_text(color).strip()
    return s if s.startswith("#") else f"#{s}"


def is_blank(value) -> bool:
    """Check whether a cell is empty after trimming."""
    return as_text(value).strip() == ""
