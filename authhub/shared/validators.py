"""Shared validation utilities"""

from typing import Optional
from urllib.parse import urlparse

APP_NAME_MAX_LENGTH = 25


def validate_app_name(app_name: Optional[str]) -> str:
    """
    Validate a project app name.

    Raises:
        ValueError: If missing or longer than APP_NAME_MAX_LENGTH
    """
    if not app_name or not app_name.strip():
        raise ValueError("This field is required")

    app_name = app_name.strip()
    if len(app_name) > APP_NAME_MAX_LENGTH:
        raise ValueError(f"Must be at most {APP_NAME_MAX_LENGTH} characters")

    return app_name


def validate_url(url: Optional[str]) -> str:
    """
    Validate an absolute http(s) URL.

    Returns:
        The URL without a trailing slash

    Raises:
        ValueError: If the URL is missing or not absolute
    """
    if not url:
        raise ValueError("This field is required")

    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Invalid URL")

    return url.rstrip("/")
