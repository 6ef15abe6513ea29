"""Key pair reconstruction and challenge signing."""

from __future__ import annotations

import base64
import logging
from collections.abc import Iterable
from typing import Any, NoReturn

from nats_creds.core.errors import InvalidSeed, SigningFailed
from nats_creds.core.secret import SecretBuffer
from nats_creds.core.settings import check_seed_prefixes, settings
from nats_creds.services.nkey import KeyHandle, NkeysPrimitive, SigningPrimitive

logger = logging.getLogger(__name__)


class KeyPair:
    """Signing key reconstructed from a seed.

    Holds the primitive's key handle for the lifetime of a session. Only the
    public key is ever rendered; `wipe()` (or leaving a `with` block) drops
    the private key material.
    """

    __slots__ = ("_handle", "_public_key")

    def __init__(self, handle: KeyHandle) -> None:
        public_key = handle.public_key
        if isinstance(public_key, (bytes, bytearray)):
            public_key = public_key.decode("ascii")
        self._public_key: str = public_key
        self._handle: KeyHandle | None = handle

    @property
    def public_key(self) -> str:
        """Encoded public key, safe to log and transmit."""
        return self._public_key

    @property
    def wiped(self) -> bool:
        return self._handle is None

    @property
    def handle(self) -> KeyHandle:
        """Return the primitive key handle.

        Raises:
            SigningFailed: If the key pair has already been wiped.
        """
        if self._handle is None:
            raise SigningFailed("key pair has been wiped")
        return self._handle

    def wipe(self) -> None:
        handle = getattr(self, "_handle", None)
        if handle is None:
            return
        handle.wipe()
        self._handle = None

    def __enter__(self) -> KeyPair:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.wipe()

    def __del__(self) -> None:
        self.wipe()

    def __repr__(self) -> str:
        return f"KeyPair(public_key={self._public_key!r})"

    def __reduce_ex__(self, protocol: Any) -> NoReturn:
        raise TypeError("KeyPair cannot be pickled")

    def __copy__(self) -> NoReturn:
        raise TypeError("KeyPair cannot be copied")

    def __deepcopy__(self, memo: Any) -> NoReturn:
        raise TypeError("KeyPair cannot be copied")


class ChallengeSigner:
    """Reconstructs key pairs from seeds and signs server challenges.

    Usage:
        signer = ChallengeSigner()
        with signer.reconstruct(seed) as key_pair:
            signature = signer.sign(nonce, key_pair)
    """

    def __init__(
        self,
        primitive: SigningPrimitive | None = None,
        seed_prefixes: Iterable[str] | None = None,
    ) -> None:
        """Initialize the signer.

        Args:
            primitive: Seed decoder and signer (default: `NkeysPrimitive`).
            seed_prefixes: Seed type prefixes accepted for signing, a non-empty
                subset of `SO`, `SA` and `SU` (default: settings.seed_prefixes).

        Raises:
            ValueError: If `seed_prefixes` is empty or holds another prefix.
        """
        self._primitive: SigningPrimitive = primitive if primitive is not None else NkeysPrimitive()
        if seed_prefixes is None:
            self._seed_prefixes = settings.seed_prefix_bytes
        else:
            self._seed_prefixes = tuple(
                prefix.encode("ascii") for prefix in check_seed_prefixes(seed_prefixes)
            )

    @property
    def seed_prefixes(self) -> tuple[bytes, ...]:
        return self._seed_prefixes

    def reconstruct(self, seed: SecretBuffer) -> KeyPair:
        """Decode a seed into a key pair.

        Raises:
            InvalidSeed: On an unrecognized prefix, a checksum mismatch or any
                other decoding failure.
        """
        if not seed.startswith(self._seed_prefixes):
            logger.warning("Rejected seed with an unrecognized type prefix")
            raise InvalidSeed("seed does not start with a recognized prefix")

        try:
            handle = self._primitive.decode_seed(seed.reveal_bytes())
        except InvalidSeed as err:
            logger.warning("Rejected seed: %s", err)
            raise
        except Exception as err:
            logger.warning("Rejected seed: %s", type(err).__name__)
            raise InvalidSeed("seed could not be decoded") from err

        key_pair = KeyPair(handle)
        logger.debug("Reconstructed key pair for %s", key_pair.public_key)
        return key_pair

    def sign(self, challenge: bytes, key_pair: KeyPair) -> SecretBuffer:
        """Sign `challenge` and return the URL-safe, unpadded Base64 signature.

        The exact challenge bytes are passed to the primitive; nothing is
        hashed or transformed beforehand.

        Raises:
            SigningFailed: If the key pair was wiped or the primitive fails.
        """
        handle = key_pair.handle
        try:
            signature = self._primitive.sign(handle, bytes(challenge))
        except SigningFailed:
            logger.error("Signing failed for %s", key_pair.public_key)
            raise
        except Exception as err:
            logger.error("Signing failed for %s: %s", key_pair.public_key, type(err).__name__)
            raise SigningFailed("signing primitive reported an error") from err

        encoded = base64.urlsafe_b64encode(signature).rstrip(b"=")
        logger.debug("Signed %d-byte challenge for %s", len(challenge), key_pair.public_key)
        return SecretBuffer(encoded)
