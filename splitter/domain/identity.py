"""Caller and role identity normalization helpers."""

from __future__ import annotations

from typing import Final

ZERO_IDENTITY: Final[str] = "0x" + "0" * 40


def domain_identity_is_null(identity: str | None) -> bool:
    """Return whether an identity is the null identity.

    `None`, blank strings and the all-zero address are all treated as null.

    Args:
        identity: Raw identity value.

    Returns:
        bool: True when the identity must not hold a ledger role.
    """

    if identity is None:
        return True
    if not isinstance(identity, str):
        return True
    stripped_identity = identity.strip()
    return not stripped_identity or stripped_identity.lower() == ZERO_IDENTITY


def domain_normalize_identity(identity: str | None) -> str | None:
    """Strip surrounding whitespace and collapse null identities to None.

    Args:
        identity: Raw identity value.

    Returns:
        str | None: Normalized identity, or None for the null identity.
    """

    if domain_identity_is_null(identity):
        return None
    return identity.strip()
