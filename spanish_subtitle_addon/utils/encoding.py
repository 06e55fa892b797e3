from __future__ import annotations

from typing import Optional

import chardet


def decode_bytes(data: bytes, declared: Optional[str] = None) -> str:
    """Decode subtitle bytes, trusting a declared charset before falling back to detection."""
    if not data:
        return ""
    if data.startswith(b"\xef\xbb\xbf"):
        return data[3:].decode("utf-8", errors="replace")
    for encoding in (declared, chardet.detect(data).get("encoding")):
        if not encoding:
            continue
        try:
            return data.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            continue
    return data.decode("utf-8", errors="replace")
