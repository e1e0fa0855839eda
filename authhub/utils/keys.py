"""Canonical configuration keys.

Keys arrive from callers (often derived from UI labels) and are collapsed to
one camelCase identifier so cosmetic variants share a storage slot:

    "Enable SignUp", "enable sign up", "ENABLE_SIGN_UP" -> "enableSignUp"
    "enable_signup"                                     -> "enableSignup"
    "API2 Key", "api2 key", "API2_KEY"                  -> "api2Key"
"""

import re

from .sanitization import prepare_string

_SEPARATORS = re.compile(r"[^A-Za-z0-9]+")
# Acronym (ends before a capitalised word or a digit), capitalised/lower word, lone capital, digit run
_WORDS = re.compile(r"[A-Z]{2,}(?=[A-Z][a-z]|[0-9]|\b)|[A-Z]?[a-z]+|[A-Z]|[0-9]+")


def split_words(value: str) -> list[str]:
    return _WORDS.findall(_SEPARATORS.sub(" ", value))


def camel_case(value: str) -> str:
    words = [word.lower() for word in split_words(value)]
    if not words:
        return ""
    return words[0] + "".join(word.capitalize() for word in words[1:])


def normalize_key(raw: str) -> str:
    """Trim and clean untrusted input, then case-fold it to the canonical key"""
    return camel_case(prepare_string(raw))
