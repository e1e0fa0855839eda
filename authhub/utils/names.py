from typing import Optional


def get_first_name(full_name: Optional[str]) -> str:
    """First whitespace-separated part of a full name ("" when unknown)"""
    if not full_name:
        return ""
    parts = full_name.strip().split()
    return parts[0] if parts else ""
