"""Parsers for NATS credentials documents.

A combined credentials file (`.creds`) looks like this:

```
-----BEGIN NATS USER JWT-----
eyJ0eXAiOiJqd3QiLCJhbGciOiJlZDI1NTE5...
------END NATS USER JWT------

************************* IMPORTANT *************************
NKEY Seed printed below can be used to sign and prove identity.
NKEYs are sensitive and should be treated as secrets.

-----BEGIN USER NKEY SEED-----
SUAIO3FHUX5PNV2LQIIP7TZ3N4L7TX3W53MQGEIVYFIGA635OZCKEYHFLM
------END USER NKEY SEED------
```

Only the position of a block matters: the first is the JWT, the second the
seed. Labels are not inspected. A seed-only file (`.nk`) just holds the seed
on a line of its own.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from itertools import islice

from nats_creds.core.errors import InvalidSeed, MissingSeed, MissingToken, NoSeedFound
from nats_creds.core.secret import SecretBuffer
from nats_creds.services.signer import ChallengeSigner, KeyPair

logger = logging.getLogger(__name__)

# Delimiter line, token line, delimiter line. The token class cannot match
# newlines or dashes-with-text, so a match never runs past its closing line.
DECORATED_BLOCK_RE = re.compile(
    rb"\s*"
    rb"(?:-{3,}[^\r\n]*-{3,}[ \t]*\r?\n)"
    rb"[ \t]*([\w\-.=]+)[ \t]*"
    rb"(?:\r?\n[ \t]*-{3,}[^\r\n]*-{3,}[ \t]*(?:\r?\n|\Z))"
)

_TOKEN_BLOCK = 0
_SEED_BLOCK = 1


class CredentialParser:
    """Extracts user JWTs and key pairs from credentials documents."""

    def __init__(self, signer: ChallengeSigner | None = None) -> None:
        self._signer = signer if signer is not None else ChallengeSigner()

    @property
    def signer(self) -> ChallengeSigner:
        return self._signer

    def decorated_blocks(self, document: SecretBuffer) -> Iterator[SecretBuffer]:
        """Yield the content of every decorated block, in document order."""
        for match in document.finditer(DECORATED_BLOCK_RE):
            start, end = match.span(1)
            yield document.slice(start, end)

    def parse_combined(self, document: SecretBuffer) -> tuple[SecretBuffer, KeyPair]:
        """Parse a combined credentials document.

        Returns:
            The user JWT from the first block and the key pair decoded from
            the seed in the second block. Further blocks are ignored.

        Raises:
            MissingToken: If the document has no decorated block.
            MissingSeed: If the document has only one decorated block.
            InvalidSeed: If the second block does not decode to a key pair.
        """
        blocks = list(islice(self.decorated_blocks(document), _SEED_BLOCK + 1))
        logger.debug("Found %d decorated block(s) in credentials document", len(blocks))

        if len(blocks) <= _TOKEN_BLOCK:
            raise MissingToken("cannot parse user JWT from the credentials document")
        token = blocks[_TOKEN_BLOCK]
        if len(blocks) <= _SEED_BLOCK:
            token.wipe()
            raise MissingSeed("cannot parse nkey seed from the credentials document")

        with blocks[_SEED_BLOCK] as seed:
            try:
                key_pair = self._signer.reconstruct(seed)
            except InvalidSeed:
                token.wipe()
                raise
        return token, key_pair

    def parse_seed_only(self, document: SecretBuffer) -> KeyPair:
        """Parse a seed-only document.

        The first line that, once trimmed, starts with a recognized seed
        prefix is decoded; later candidates are ignored.

        Raises:
            NoSeedFound: If no line starts with a recognized prefix.
            InvalidSeed: If the matching line does not decode to a key pair.
        """
        prefixes = self._signer.seed_prefixes
        for start, end in document.line_spans():
            if document.startswith(prefixes, start, end):
                with document.slice(start, end) as seed:
                    return self._signer.reconstruct(seed)
        raise NoSeedFound("no nkey seed found")
