import html
import re
import unicodedata
from typing import Optional

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Sanitize a string by escaping HTML special characters to prevent XSS.
    Returns None if input is None.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    return html.escape(str(value), quote=True)


def prepare_string(value: Optional[str], max_length: int = 255) -> str:
    """
    Clean untrusted input before it is turned into an identifier.

    Folds accented characters to their ASCII base, drops anything that is
    not ASCII, removes control characters and trims surrounding whitespace.

    Args:
        value: Raw input string
        max_length: Maximum allowed length after cleaning

    Returns:
        Cleaned string (empty string for empty input)

    Raises:
        ValueError: If the cleaned input is too long
    """
    if not value:
        return ""

    value = unicodedata.normalize("NFKD", str(value))
    value = value.encode("ascii", "ignore").decode("ascii")
    value = _CONTROL_CHARS.sub("", value).strip()

    if len(value) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    return value
