# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""
Base HTTP Schema (Adapters Layer)

Purpose:
    Canonical Pydantic base for all adapter-layer HTTP schemas.
    Enforces strict config and deterministic JSON encoding.

Layer: adapters/schemas/http

Notes:
    - Transport-facing only. Domain/application code must not import from this module.
    - Envelopes import and subclass this base.
"""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class BaseHTTPSchema(BaseModel):
    """Base class for all HTTP-facing schemas.

    Attributes:
        model_config: Pydantic v2 `ConfigDict` with strict validation. Dates
            serialize as ISO ``YYYY-MM-DD`` in JSON mode.
    """

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        ser_json_inf_nan="null",
        use_enum_values=True,
    )

    def model_dump_http(self, **kwargs: Any) -> dict[str, Any]:
        """Return a JSON-serializable dict suitable for HTTP responses.

        Null-valued fields are kept unless the caller passes
        ``exclude_none=True``.

        Args:
            **kwargs: Optional Pydantic dump settings.

        Returns:
            Fully JSON-serializable representation.
        """
        return self.model_dump(mode="json", **kwargs)
