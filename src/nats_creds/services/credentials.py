"""File-level entry points used by the connection handshake.

These read a credentials file, hand its contents to `CredentialParser` and
always scrub the file contents before returning.
"""

from __future__ import annotations

import logging
import os
from os import PathLike

from nats_creds.core.errors import FileUnreadable
from nats_creds.core.secret import SecretBuffer
from nats_creds.services.parser import CredentialParser
from nats_creds.services.signer import ChallengeSigner, KeyPair

logger = logging.getLogger(__name__)


def read_document(path: str | PathLike[str]) -> SecretBuffer:
    """Read a credentials document into a `SecretBuffer`.

    Raises:
        FileUnreadable: If the file cannot be opened or read.
    """
    try:
        return SecretBuffer.from_file(path)
    except OSError as err:
        logger.warning("Cannot read credentials file %s: %s", os.fspath(path), err.strerror)
        raise FileUnreadable(f"cannot read credentials file {os.fspath(path)!r}") from err


def load_creds(
    path: str | PathLike[str],
    parser: CredentialParser | None = None,
) -> tuple[SecretBuffer, KeyPair]:
    """Load the user JWT and key pair from a `.creds` file."""
    parser = parser if parser is not None else CredentialParser()
    with read_document(path) as contents:
        return parser.parse_combined(contents)


def load_nk(
    path: str | PathLike[str],
    parser: CredentialParser | None = None,
) -> KeyPair:
    """Load the key pair from a seed-only `.nk` file."""
    parser = parser if parser is not None else CredentialParser()
    with read_document(path) as contents:
        return parser.parse_seed_only(contents)


def sign_nonce(
    nonce: bytes,
    key_pair: KeyPair,
    signer: ChallengeSigner | None = None,
) -> SecretBuffer:
    """Sign a server nonce and return the Base64URL-encoded signature."""
    signer = signer if signer is not None else ChallengeSigner()
    return signer.sign(nonce, key_pair)
