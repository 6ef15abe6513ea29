"""Exceptions raised while loading credentials and signing challenges.

Messages never include secret material (seeds, tokens, file contents).
"""

from __future__ import annotations


class CredentialsError(RuntimeError):
    """Base exception for credential loading and signing failures."""


class FileUnreadable(CredentialsError):
    """Raised when a credentials document cannot be read from disk."""


class ParseError(CredentialsError):
    """Base exception for malformed credentials documents."""


class MissingToken(ParseError):
    """Raised when a credentials document has no decorated block at all."""


class MissingSeed(ParseError):
    """Raised when a credentials document has a token block but no seed block."""


class NoSeedFound(ParseError):
    """Raised when a seed-only document has no line starting with a seed prefix."""


class InvalidSeed(ParseError):
    """Raised when seed text cannot be decoded into a key pair.

    Covers unrecognized prefixes, checksum mismatches and malformed encodings.
    """


class SignError(CredentialsError):
    """Base exception for signing failures."""


class SigningFailed(SignError):
    """Raised when the signing primitive reports an error.

    This is never retried: a key that failed to sign once will fail again.
    """
