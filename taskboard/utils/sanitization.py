import re

_TAG_RE = re.compile(r'<[^>]*>')


def sanitize_string(v):
    if not isinstance(v, str):
        return v
    # Drop HTML tags, then surrounding whitespace
    return _TAG_RE.sub('', v).strip()


def escape_like(term: str, escape: str = "\\") -> str:
    """Escape LIKE wildcards so a search term only matches literally."""
    return (
        term.replace(escape, escape + escape)
        .replace("%", escape + "%")
        .replace("_", escape + "_")
    )
