"""Trusted signing primitive for NKEY seeds.

The rest of the package only talks to the `SigningPrimitive` protocol, so a
test double with known-answer vectors can stand in for `NkeysPrimitive`.
"""

from __future__ import annotations

import base64
import binascii
from typing import Protocol

import nkeys

from nats_creds.core.errors import InvalidSeed, SigningFailed

_CHECKSUM_BYTES = 2
_BASE32_BLOCK = 8


class KeyHandle(Protocol):
    """Key object returned by a signing primitive."""

    @property
    def public_key(self) -> bytes: ...

    def wipe(self) -> None: ...


class SigningPrimitive(Protocol):
    """Seed decoding and detached signing, as provided by a crypto library."""

    def decode_seed(self, seed: bytes) -> KeyHandle: ...

    def sign(self, key: KeyHandle, message: bytes) -> bytes: ...


def verify_checksum(seed: bytes) -> None:
    """Check the CRC16 trailer of a base32 NKEY seed.

    Raises:
        InvalidSeed: If the seed is not base32 or its checksum does not match.
    """
    padding = b"=" * (-len(seed) % _BASE32_BLOCK)
    try:
        raw = base64.b32decode(seed + padding)
    except binascii.Error as err:
        raise InvalidSeed("seed is not valid base32") from err
    if len(raw) <= _CHECKSUM_BYTES:
        raise InvalidSeed("seed is too short")

    payload, checksum = raw[:-_CHECKSUM_BYTES], raw[-_CHECKSUM_BYTES:]
    if nkeys.crc16_checksum(payload) != checksum:
        raise InvalidSeed("seed checksum mismatch")


class NkeysPrimitive:
    """Ed25519 NKEY primitive backed by the `nkeys` package."""

    def decode_seed(self, seed: bytes) -> nkeys.KeyPair:
        """Decode an encoded seed into an `nkeys.KeyPair`."""
        verify_checksum(seed)
        try:
            return nkeys.from_seed(seed)
        except Exception as err:
            raise InvalidSeed(f"seed rejected by nkeys ({type(err).__name__})") from err

    def sign(self, key: nkeys.KeyPair, message: bytes) -> bytes:
        """Return the raw Ed25519 signature of `message`."""
        try:
            return key.sign(message)
        except Exception as err:
            raise SigningFailed(f"nkeys failed to sign ({type(err).__name__})") from err
