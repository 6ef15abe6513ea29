"""Credential parsing and challenge signing services."""

from .credentials import load_creds, load_nk, read_document, sign_nonce
from .nkey import NkeysPrimitive, SigningPrimitive
from .parser import CredentialParser
from .signer import ChallengeSigner, KeyPair

__all__ = [
    "ChallengeSigner",
    "CredentialParser",
    "KeyPair",
    "NkeysPrimitive",
    "SigningPrimitive",
    "load_creds",
    "load_nk",
    "read_document",
    "sign_nonce",
]
