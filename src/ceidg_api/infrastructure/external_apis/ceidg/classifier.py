# src/ceidg_api/infrastructure/external_apis/ceidg/classifier.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""CEIDG response classifier.

Turns an upstream ``(status, body)`` pair into one tagged outcome:

* ``Empty``: 404 Not Found, 204 No Content, or a 2xx with a blank body.
* ``InvalidIdentifier``: 400 whose body carries a known invalid-NIP marker.
  CEIDG reports malformed/unknown identifiers this way instead of 404.
* ``UpstreamError``: any other 400, any other status >= 400, and anything
  outside 2xx. Also a 2xx whose body is not JSON.
* ``Ok``: 2xx with a JSON body (parsed).

``TransportFailure`` is produced by the client when no response arrived.

Classification never raises; undecodable bytes are replaced, and the raw text
becomes the error detail.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, ClassVar, Final

__all__ = [
    "ClassifiedOutcome",
    "Empty",
    "INVALID_IDENTIFIER_MARKERS",
    "InvalidIdentifier",
    "Ok",
    "TransportFailure",
    "UpstreamError",
    "classify",
]

#: Substrings CEIDG embeds in 400 bodies for rejected identifiers.
INVALID_IDENTIFIER_MARKERS: Final[tuple[str, ...]] = (
    "NIEPOPRAWNY_NUMER_NIP",
    "Niepoprawny identyfikator",
)

_EMPTY_STATUSES: Final[frozenset[int]] = frozenset({204, 404})


@dataclass(frozen=True, slots=True)
class Empty:
    """Upstream has no record."""

    label: ClassVar[str] = "empty"


@dataclass(frozen=True, slots=True)
class InvalidIdentifier:
    """Upstream rejected the identifier (400 with a known marker)."""

    label: ClassVar[str] = "invalid_identifier"


@dataclass(frozen=True, slots=True)
class UpstreamError:
    """Upstream error status with the raw response text."""

    status_code: int
    body: str

    label: ClassVar[str] = "upstream_error"


@dataclass(frozen=True, slots=True)
class TransportFailure:
    """No HTTP response (connection error, timeout, malformed URL)."""

    reason: str

    label: ClassVar[str] = "transport_failure"


@dataclass(frozen=True, slots=True)
class Ok:
    """Successful response; ``body`` is the parsed JSON document."""

    body: Any

    label: ClassVar[str] = "ok"


type ClassifiedOutcome = Empty | InvalidIdentifier | UpstreamError | TransportFailure | Ok


def _decode(body: bytes) -> str:
    return body.decode("utf-8", errors="replace")


def classify(status_code: int, body: bytes) -> ClassifiedOutcome:
    """Classify an upstream response.

    Args:
        status_code: HTTP status code.
        body: Raw response body.

    Returns:
        Tagged outcome; never raises.
    """
    if status_code in _EMPTY_STATUSES:
        return Empty()

    text = _decode(body)

    if status_code == 400:
        if any(marker in text for marker in INVALID_IDENTIFIER_MARKERS):
            return InvalidIdentifier()
        return UpstreamError(status_code=status_code, body=text)

    if not 200 <= status_code < 300:
        return UpstreamError(status_code=status_code, body=text)

    if not text.strip():
        return Empty()

    try:
        return Ok(body=json.loads(text))
    except ValueError:
        return UpstreamError(status_code=status_code, body=text)
