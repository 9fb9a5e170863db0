# src/ceidg_api/domain/interfaces/gateways/company_registry_gateway.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Company Registry Gateway Protocol.

Synopsis:
    Domain-level Protocol (PEP 544) abstracting the upstream company registry,
    plus the tagged outcomes a fetch can produce. Absence and failure are
    distinct variants so callers can tell them apart without catching
    exceptions:

      * ``RegistryNotFound``: the registry has no record for the NIP.
      * ``RegistryInvalidFormat``: the registry rejected the NIP as malformed.
      * ``RegistryFound``: raw (summary merged with detail) record payload.
      * ``RegistryError``: the registry answered with an error status.
      * ``RegistryTransportFailure``: the registry could not be reached.

Layer:
    domain/interfaces/gateways
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from ceidg_api.domain.value_objects.nip import Nip

__all__ = [
    "CompanyRegistryGateway",
    "FetchResult",
    "RegistryError",
    "RegistryFound",
    "RegistryInvalidFormat",
    "RegistryNotFound",
    "RegistryTransportFailure",
]


@dataclass(frozen=True, slots=True)
class RegistryNotFound:
    """The registry confirms there is no record."""


@dataclass(frozen=True, slots=True)
class RegistryInvalidFormat:
    """The registry signalled that the identifier is invalid."""


@dataclass(frozen=True, slots=True)
class RegistryFound:
    """A record was found; ``payload`` is the merged upstream mapping."""

    payload: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class RegistryError:
    """Non-transient upstream error with raw diagnostics."""

    status_code: int
    body: str


@dataclass(frozen=True, slots=True)
class RegistryTransportFailure:
    """Connection or timeout failure reaching the registry."""

    reason: str


type FetchResult = (
    RegistryNotFound
    | RegistryInvalidFormat
    | RegistryFound
    | RegistryError
    | RegistryTransportFailure
)


class CompanyRegistryGateway(Protocol):
    """Abstraction over the upstream company registry.

    Implementations must never raise for expected upstream conditions; every
    outcome is returned as one of the :data:`FetchResult` variants.
    """

    async def fetch(self, nip: Nip) -> FetchResult:
        """Fetch the raw record for ``nip``.

        Args:
            nip: Canonical NIP.

        Returns:
            Tagged fetch outcome.
        """
        ...
