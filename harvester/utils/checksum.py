"""Checksum utilities for detecting unchanged seed files between runs."""

from __future__ import annotations

import hashlib
from pathlib import Path


def file_hash(path: Path) -> str:
    """Compute SHA-256 hash of a file."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def content_hash(text: str) -> str:
    """Compute SHA-256 hash of a string as it would be written in UTF-8."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()
