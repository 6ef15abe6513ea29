"""NATS credentials loading and nonce signing."""

from nats_creds.core.errors import (
    CredentialsError,
    FileUnreadable,
    InvalidSeed,
    MissingSeed,
    MissingToken,
    NoSeedFound,
    ParseError,
    SignError,
    SigningFailed,
)
from nats_creds.core.secret import SecretBuffer
from nats_creds.services import (
    ChallengeSigner,
    CredentialParser,
    KeyPair,
    NkeysPrimitive,
    SigningPrimitive,
    load_creds,
    load_nk,
    sign_nonce,
)

__version__ = "0.1.0"

__all__ = [
    "ChallengeSigner",
    "CredentialParser",
    "CredentialsError",
    "FileUnreadable",
    "InvalidSeed",
    "KeyPair",
    "MissingSeed",
    "MissingToken",
    "NkeysPrimitive",
    "NoSeedFound",
    "ParseError",
    "SecretBuffer",
    "SignError",
    "SigningFailed",
    "SigningPrimitive",
    "load_creds",
    "load_nk",
    "sign_nonce",
]
