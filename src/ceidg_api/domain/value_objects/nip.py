# src/ceidg_api/domain/value_objects/nip.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""NIP value object (Domain Layer).

Purpose:
    Canonical Polish tax identifier: exactly ten ASCII digits after every
    non-digit character has been stripped from the raw input. No checksum is
    verified; the registry is the source of truth for existence.

Layer:
    domain/value_objects
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from ceidg_api.domain.exceptions.ceidg import InvalidNipFormat

__all__ = ["Nip", "NIP_LENGTH"]

NIP_LENGTH: Final[int] = 10

_NON_DIGITS: Final[re.Pattern[str]] = re.compile(r"[^0-9]")
_CANONICAL: Final[re.Pattern[str]] = re.compile(r"[0-9]{10}")


@dataclass(frozen=True, slots=True)
class Nip:
    """Canonical NIP.

    Args:
        value: Ten ASCII decimal digits.

    Raises:
        InvalidNipFormat: If ``value`` is not already in canonical form.
    """

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not _CANONICAL.fullmatch(self.value):
            raise InvalidNipFormat("NIP must consist of exactly 10 digits")

    @classmethod
    def parse(cls, raw: str | None) -> Nip:
        """Normalize a raw candidate into a canonical NIP.

        Separators such as spaces and hyphens (and any other non-digit
        character) are dropped before the length check.

        Args:
            raw: Candidate identifier as typed by a user.

        Returns:
            The canonical NIP.

        Raises:
            InvalidNipFormat: If anything other than exactly 10 digits remains.
        """
        digits = _NON_DIGITS.sub("", raw or "")
        if len(digits) != NIP_LENGTH:
            raise InvalidNipFormat(
                "NIP must consist of exactly 10 digits",
                details={"digits": len(digits)},
            )
        return cls(digits)

    def __str__(self) -> str:
        return self.value
