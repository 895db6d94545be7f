"""
URL slugs derived from article titles.
"""

import re

_QUOTES = "'\""
_SEPARATOR = re.compile(r"[^\w'\"]|_")


def slugify(title: str) -> str:
    """
    Lowercase ``title`` and join its words with hyphens.

    Words are split on anything that is neither alphanumeric nor a quote,
    so contractions and possessives stay in one piece once the quotes are
    dropped ("It's" becomes "its").

    >>> slugify("Converting to Rust from C: It's as Easy as 1, 2, 3!")
    'converting-to-rust-from-c-its-as-easy-as-1-2-3'
    """
    words = [word for word in _SEPARATOR.split(title) if word]
    return "-".join(
        word.translate(str.maketrans("", "", _QUOTES)).lower()
        for word in words
    )
