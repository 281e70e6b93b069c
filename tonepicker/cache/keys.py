"""Deterministic cache keys for transformation requests."""

import hashlib

from ..prompt.mapper import Coordinate


def cache_key(text: str, coord: Coordinate, prompt_version: str) -> str:
    """
    SHA-256 hex digest of ``text|x|y|version``.

    Identical inputs always give the same key; changing any of the text,
    the coordinate or the prompt version gives a different one.
    """
    key_data = f"{text}|{coord.x}|{coord.y}|{prompt_version}"
    # Lone surrogates are legal in decoded JSON strings
    return hashlib.sha256(key_data.encode("utf-8", errors="surrogatepass")).hexdigest()
