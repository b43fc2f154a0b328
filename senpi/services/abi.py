"""
Minimal ABI encoding for the handful of contract calls the plugins make
(ERC20 reads and the rewards ``withdraw``).
"""

from __future__ import annotations

from eth_utils import keccak


def _strip_0x(value: str) -> str:
    return value[2:] if value.startswith("0x") else value


def encode_uint(value: int) -> str:
    if value < 0:
        raise ValueError("Value must be non-negative")
    return hex(value)[2:].rjust(64, "0")


def encode_address(address: str) -> str:
    addr = _strip_0x(address).lower()
    if len(addr) != 40:
        raise ValueError(f"Invalid address length: {address}")
    return addr.rjust(64, "0")


def selector(signature: str) -> str:
    return f"0x{keccak(text=signature)[:4].hex()}"


def encode_call(signature: str, *words: str) -> str:
    """Calldata for ``signature`` with already-encoded static arguments."""
    return selector(signature) + "".join(words)


def decode_uint(result: str) -> int:
    hex_data = _strip_0x(result or "")
    return int(hex_data, 16) if hex_data else 0


def decode_string(result: str) -> str:
    """
    Decode a ``string`` return value.

    Some older tokens return ``bytes32`` for ``symbol()``; that form is
    decoded by trimming trailing null bytes.
    """
    hex_data = _strip_0x(result or "")
    if not hex_data:
        return ""

    raw = bytes.fromhex(hex_data)
    if len(raw) == 32:
        return raw.rstrip(b"\x00").decode("utf-8", errors="ignore")

    offset = int.from_bytes(raw[:32], "big")
    length = int.from_bytes(raw[offset:offset + 32], "big")
    start = offset + 32
    return raw[start:start + length].decode("utf-8", errors="ignore")


__all__ = [
    "encode_uint",
    "encode_address",
    "selector",
    "encode_call",
    "decode_uint",
    "decode_string",
]
