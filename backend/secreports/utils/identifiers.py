from __future__ import annotations

import os
import re
import secrets
import string
import time
import uuid
from pathlib import PurePath

_SAFE_NAME = re.compile(r"[^a-zA-Z0-9.-]")
_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def generate_uuid7() -> str:
    """
    Generate a UUIDv7 string (time-ordered).

    Used as the primary key default for every table:
    - 48-bit Unix timestamp in milliseconds
    - 4-bit version (0b0111)
    - 74-bit randomness
    """
    ts_ms = int(time.time() * 1000)
    raw = bytearray(ts_ms.to_bytes(6, "big", signed=False) + os.urandom(10))
    raw[6] = (raw[6] & 0x0F) | 0x70
    raw[8] = (raw[8] & 0x3F) | 0x80
    return str(uuid.UUID(bytes=bytes(raw)))


def unique_upload_name(field_name: str, original_name: str) -> str:
    """
    Build a collision-resistant stored file name:
    `<field>-<base>-<timestamp_ms>-<random><ext>`.

    The original name is sanitised and the base truncated to 20 chars so
    nothing from the client ends up in a path unescaped.
    """
    cleaned = _SAFE_NAME.sub("_", PurePath(original_name or "").name)
    suffix = PurePath(cleaned).suffix or ".unknown"
    base = cleaned[: -len(suffix)] if cleaned.endswith(suffix) else cleaned
    base = base[:20] or "file"
    random_part = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(12))
    return f"{field_name}-{base}-{int(time.time() * 1000)}-{random_part}{suffix}"
