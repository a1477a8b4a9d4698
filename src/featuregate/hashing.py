"""MurmurHash3 (x86, 32-bit) used for percentage rollout buckets.

The hash is not cryptographic. It only spreads users evenly and reproducibly
across ``[0, 1]`` so that a rollout decision for a (flag, user) pair never
changes between evaluations, processes or machines.
"""

from __future__ import annotations

MAX_UINT32 = 0xFFFFFFFF

_C1 = 0xCC9E2D51
_C2 = 0x1B873593


def _rotl32(value: int, shift: int) -> int:
    return ((value << shift) | (value >> (32 - shift))) & MAX_UINT32


def _scramble(k: int) -> int:
    k = (k * _C1) & MAX_UINT32
    k = _rotl32(k, 15)
    return (k * _C2) & MAX_UINT32


def murmurhash3_32(key: str | bytes, seed: int = 0) -> int:
    """Return the unsigned 32-bit MurmurHash3 of ``key``.

    Strings are hashed as their UTF-8 encoding.
    """
    data = key.encode("utf-8") if isinstance(key, str) else bytes(key)
    length = len(data)
    h = seed & MAX_UINT32

    block_end = length - (length % 4)
    for offset in range(0, block_end, 4):
        h ^= _scramble(int.from_bytes(data[offset : offset + 4], "little"))
        h = _rotl32(h, 13)
        h = (h * 5 + 0xE6546B64) & MAX_UINT32

    tail = data[block_end:]
    if tail:
        h ^= _scramble(int.from_bytes(tail, "little"))

    h ^= length & MAX_UINT32
    h ^= h >> 16
    h = (h * 0x85EBCA6B) & MAX_UINT32
    h ^= h >> 13
    h = (h * 0xC2B2AE35) & MAX_UINT32
    h ^= h >> 16
    return h


def bucket(flag_name: str, user_id: str) -> float:
    """Position of ``user_id`` in ``[0, 1]`` for ``flag_name``."""
    return murmurhash3_32(f"{flag_name}-{user_id}") / MAX_UINT32
