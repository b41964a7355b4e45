"""Reading and writing versioned JSON mappings on disk.

Every file holds ``{"version": 1, "data": {...}}``. Output is deterministic:
keys keep their insertion order and gzip files carry a zero mtime, so the
same content always produces the same bytes.
"""
from __future__ import annotations

import gzip
import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


class PersistenceError(Exception):
    """Base error for cache and stats files."""


class CorruptFileError(PersistenceError):
    """File exists but does not hold a mapping in the expected format."""


def read_mapping(path: Path, *, compressed: bool = False) -> dict[str, Any] | None:
    """Read the mapping stored at ``path``.

    Returns:
        The stored mapping, or None if the file does not exist.

    Raises:
        CorruptFileError: If the file cannot be decoded or is not a mapping.
    """
    if not path.exists():
        return None
    logger.debug("Reading %s", path)
    try:
        raw = path.read_bytes()
        if compressed:
            raw = gzip.decompress(raw)
        envelope = json.loads(raw.decode("utf-8"))
    except (OSError, EOFError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CorruptFileError(f"could not decode {path}: {e}") from e

    if not isinstance(envelope, dict) or not isinstance(envelope.get("data"), dict):
        raise CorruptFileError(f"not a mapping in: {path}")
    if envelope.get("version") != FORMAT_VERSION:
        raise CorruptFileError(
            f"unsupported format version {envelope.get('version')!r} in: {path}"
        )
    return envelope["data"]


def write_mapping(path: Path, data: dict[str, Any], *, compressed: bool = False) -> None:
    """Write ``data`` to ``path`` atomically, creating parent directories."""
    logger.debug("Writing %s", path)
    payload = json.dumps(
        {"version": FORMAT_VERSION, "data": data},
        ensure_ascii=False,
        separators=(",", ":"),
    ).encode("utf-8")
    if compressed:
        payload = gzip.compress(payload, mtime=0)

    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    try:
        tmp_path.write_bytes(payload)
        tmp_path.replace(path)
    finally:
        if tmp_path.is_file():
            tmp_path.unlink()
