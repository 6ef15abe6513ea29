# tests/conftest.py
from __future__ import annotations

import base64
from collections.abc import Iterator
from pathlib import Path

import nkeys
import pytest

from nats_creds.core.errors import SigningFailed
from nats_creds.services.parser import CredentialParser
from nats_creds.services.signer import ChallengeSigner

# Known-answer vectors for the NATS sample user seed.
GOLDEN_SEED = "SUAIO3FHUX5PNV2LQIIP7TZ3N4L7TX3W53MQGEIVYFIGA635OZCKEYHFLM"
GOLDEN_PUBLIC_KEY = "UD2FLLGFERQVQQ3SBKONNG2QMIMTZQKKLTU3AVG5I3EQEFHBPGPE2XQS"
GOLDEN_CHALLENGE = bytes([0x01, 0x02, 0x03])
GOLDEN_SIGNATURE = (
    "IPa7NkmJAKTj9y9y9K105A7xcIbfIP8XgBEPOXep1gy8byTX4vVC6eplejx9KRdKwOQW47uOEsRVDVZjvLiOAQ"
)
TEST_JWT = "eyJhbGciOiJlZDI1NTE5In0"

PREFIX_BYTE_SEED = 18 << 3
PREFIX_BYTE_OPERATOR = 14 << 3
PREFIX_BYTE_ACCOUNT = 0
PREFIX_BYTE_USER = 20 << 3


def _decode_b64(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def encode_seed(raw_seed: bytes, key_type: int = PREFIX_BYTE_USER) -> str:
    """Encode a raw 32-byte Ed25519 seed as an NKEY seed string."""
    payload = bytes(
        [PREFIX_BYTE_SEED | (key_type >> 5), (key_type & 31) << 3]
    ) + raw_seed
    checksum = nkeys.crc16_checksum(payload)
    return base64.b32encode(payload + checksum).decode().rstrip("=")


def raw_seed_of(seed: str) -> bytes:
    """Return the raw 32-byte Ed25519 seed inside an NKEY seed string."""
    decoded = base64.b32decode(seed + "=" * (-len(seed) % 8))
    return decoded[2:-2]


def build_creds(jwt: str = TEST_JWT, seed: str = GOLDEN_SEED, newline: str = "\n") -> str:
    """Build a combined credentials document the way `nsc` writes it."""
    lines = [
        "-----BEGIN NATS USER JWT-----",
        jwt,
        "------END NATS USER JWT------",
        "",
        "************************* IMPORTANT *************************",
        "NKEY Seed printed below can be used to sign and prove identity.",
        "NKEYs are sensitive and should be treated as secrets.",
        "",
        "-----BEGIN USER NKEY SEED-----",
        seed,
        "------END USER NKEY SEED------",
        "",
        "*************************************************************",
        "",
    ]
    return newline.join(lines)


class FakeHandle:
    """Key handle returned by `FakePrimitive`."""

    def __init__(self, seed: bytes, public_key: bytes = b"UFAKEPUBLICKEY") -> None:
        self.seed = seed
        self.public_key = public_key
        self.wiped = False

    def wipe(self) -> None:
        self.wiped = True


class FakePrimitive:
    """Signing primitive double with a fixed signature and optional failures."""

    def __init__(
        self,
        signature: bytes = b"\xfb\xff\xfe",
        decode_error: Exception | None = None,
        sign_error: Exception | None = None,
    ) -> None:
        self.signature = signature
        self.decode_error = decode_error
        self.sign_error = sign_error
        self.decoded: list[bytes] = []
        self.signed: list[bytes] = []
        self.handles: list[FakeHandle] = []

    def decode_seed(self, seed: bytes) -> FakeHandle:
        self.decoded.append(seed)
        if self.decode_error is not None:
            raise self.decode_error
        handle = FakeHandle(seed)
        self.handles.append(handle)
        return handle

    def sign(self, key: FakeHandle, message: bytes) -> bytes:
        self.signed.append(message)
        if self.sign_error is not None:
            raise self.sign_error
        return self.signature


@pytest.fixture()
def signer() -> ChallengeSigner:
    return ChallengeSigner()


@pytest.fixture()
def parser(signer: ChallengeSigner) -> CredentialParser:
    return CredentialParser(signer)


@pytest.fixture()
def fake_primitive() -> FakePrimitive:
    return FakePrimitive()


@pytest.fixture()
def fake_parser(fake_primitive: FakePrimitive) -> CredentialParser:
    return CredentialParser(ChallengeSigner(fake_primitive))


@pytest.fixture()
def failing_primitive() -> FakePrimitive:
    return FakePrimitive(sign_error=SigningFailed("corrupted key state"))


@pytest.fixture()
def creds_file(tmp_path: Path) -> Iterator[Path]:
    path = tmp_path / "user.creds"
    path.write_text(build_creds())
    yield path


class RecordingParser(CredentialParser):
    """Parser that keeps every block buffer it hands out, to check scrubbing."""

    def __init__(self, signer: ChallengeSigner | None = None) -> None:
        super().__init__(signer)
        self.blocks: list = []

    def decorated_blocks(self, document):
        for block in super().decorated_blocks(document):
            self.blocks.append(block)
            yield block
