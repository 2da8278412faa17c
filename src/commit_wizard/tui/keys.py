"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into normalized key tokens:
single printable characters are returned as themselves, everything else
as an upper-case name such as ``"UP"``, ``"BACKTAB"`` or ``"CTRL_S"``.
An empty string means no key arrived before the timeout.
"""

from __future__ import annotations

import os
import select
from typing import List, Optional

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: List[bytes] = []

_CONTROL_KEYS = {
    b"\t": "TAB",
    b"\r": "ENTER",
    b"\n": "ENTER",
    b"\x7f": "BACKSPACE",
    b"\x08": "BACKSPACE",
    b"\x01": "CTRL_A",
    b"\x03": "CTRL_C",
    b"\x05": "CTRL_E",
    b"\x0b": "CTRL_K",
    b"\x0c": "CTRL_L",
    b"\x13": "CTRL_S",
    b"\x15": "CTRL_U",
}

# Final byte of "ESC [ <final>" sequences.
_CSI_KEYS = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
    b"Z": "BACKTAB",
}

# Numeric "ESC [ <n> ~" sequences.
_TILDE_KEYS = {
    "1": "HOME",
    "3": "DELETE",
    "4": "END",
    "5": "PAGE_UP",
    "6": "PAGE_DOWN",
    "7": "HOME",
    "8": "END",
    "11": "F1",
}

# "ESC O <final>" sequences sent in application cursor mode.
_SS3_KEYS = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
    b"P": "F1",
}


def _read_ready_byte(fd: int, timeout_ms: int) -> Optional[bytes]:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _utf8_length(first: int) -> int:
    if first >= 0xF0:
        return 4
    if first >= 0xE0:
        return 3
    if first >= 0xC0:
        return 2
    return 1


def _decode_escape(fd: int) -> str:
    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq == b"O":
        final = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if final is None:
            return "ESC"
        return _SS3_KEYS.get(final, "ESC")
    if seq != b"[":
        # Alt+key or a lone Esc followed by a fast key press.
        _PENDING_BYTES.append(seq)
        return "ESC"

    params = b""
    while True:
        part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if part is None:
            return "ESC"
        if part in _CSI_KEYS and not params:
            return _CSI_KEYS[part]
        if part == b"~":
            return _TILDE_KEYS.get(params.decode("ascii", errors="replace").split(";")[0], "ESC")
        if part.isalpha():
            # Modified keys such as ESC [ 1 ; 5 A map to the plain key.
            return _CSI_KEYS.get(part, "ESC")
        params += part
        if len(params) > 16:
            return "ESC"


def read_key(fd: int, timeout_ms: Optional[int] = None) -> str:
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""
        ch = os.read(fd, 1)
        if not ch:
            return ""

    if ch in _CONTROL_KEYS:
        return _CONTROL_KEYS[ch]
    if ch == b"\x1b":
        return _decode_escape(fd)

    length = _utf8_length(ch[0])
    while len(ch) < length:
        nxt = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if nxt is None:
            break
        ch += nxt
    text = ch.decode("utf-8", errors="replace")
    if not text.isprintable():
        return ""
    return text
