"""Library settings and configuration.

Settings are loaded from environment variables (or an `.env` file) with
defaults that match the NATS credential file conventions.
"""

from collections.abc import Iterable

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Operator, account and user seeds are the only ones that sign connection nonces.
SIGNING_SEED_PREFIXES = ("SO", "SA", "SU")


def check_seed_prefixes(prefixes: Iterable[str]) -> list[str]:
    """Return `prefixes` as a list, rejecting an empty or widened set.

    Raises:
        ValueError: If no prefix is given or one is not a signing seed prefix.
    """
    checked = list(prefixes)
    if not checked:
        raise ValueError("at least one seed prefix is required")
    unknown = sorted(set(checked) - set(SIGNING_SEED_PREFIXES))
    if unknown:
        raise ValueError(
            f"unsupported seed prefixes {unknown}; expected a subset of {list(SIGNING_SEED_PREFIXES)}"
        )
    return checked


class Settings(BaseSettings):
    """Settings loaded from environment variables.

    Attributes:
        seed_prefixes: Seed type prefixes accepted for signing; a non-empty
            subset of `SO`, `SA` and `SU`.
        scrub_byte: Fill byte written over secret buffers when they are released.
        read_chunk_size: Chunk size used when reading credential files.
    """

    seed_prefixes: list[str] = Field(
        default=list(SIGNING_SEED_PREFIXES),
        alias="NATS_CREDS_SEED_PREFIXES",
    )
    scrub_byte: int = Field(default=0, ge=0, le=255, alias="NATS_CREDS_SCRUB_BYTE")
    read_chunk_size: int = Field(default=4096, gt=0, alias="NATS_CREDS_READ_CHUNK_SIZE")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @field_validator("seed_prefixes")
    @classmethod
    def _validate_seed_prefixes(cls, value: list[str]) -> list[str]:
        return check_seed_prefixes(value)

    @property
    def seed_prefix_bytes(self) -> tuple[bytes, ...]:
        """Return the seed prefixes as ASCII bytes, ready for `startswith` checks."""
        return tuple(prefix.encode("ascii") for prefix in self.seed_prefixes)


settings = Settings()
