# src/ceidg_api/adapters/routers/companies_router.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""
Companies Router (v1)

Endpoint:
    GET /v1/ceidg/companies/{nip}

Behavior:
    - The path segment must be exactly ten ASCII digits; anything else is a
      404 ``COMPANY_NOT_FOUND`` without touching the cache or upstream.
    - 200 returns ``SuccessEnvelope[CompanyHTTP]`` with a strong ``ETag``.
    - 404 ``COMPANY_NOT_FOUND`` when CEIDG has no record for the NIP.
    - 503 ``CEIDG_UNAVAILABLE`` with ``Retry-After`` when the registry could
      not be queried.
"""

from __future__ import annotations

import re
from typing import Annotated, Final

from fastapi import Depends, Path, Request, Response
from fastapi.responses import JSONResponse

from ceidg_api.adapters.presenters.company_presenter import CompanyPresenter
from ceidg_api.adapters.routers.base_router import BaseRouter
from ceidg_api.adapters.schemas.http.companies import CompanyHTTP
from ceidg_api.adapters.schemas.http.envelopes import SuccessEnvelope
from ceidg_api.application.use_cases.companies.find_company_by_nip import FindCompanyByNip
from ceidg_api.dependencies.ceidg import get_find_company_uc
from ceidg_api.domain.exceptions.ceidg import CompanyNotFound, RegistryUnavailable
from ceidg_api.infrastructure.logging.logger import get_json_logger

router = BaseRouter(version="v1", resource="ceidg/companies", tags=["CEIDG"])
presenter = CompanyPresenter()
logger = get_json_logger(__name__)

_NIP_PATH_RE: Final[re.Pattern[str]] = re.compile(r"^[0-9]{10}$")


def _not_found_message(nip: str) -> str:
    return f"Company with NIP {nip} not found in CEIDG registry"


@router.get(
    "/{nip}",
    response_model=SuccessEnvelope[CompanyHTTP],
    responses=BaseRouter.std_error_responses(),
    summary="Look up a company in CEIDG by NIP",
    description=(
        "Returns the CEIDG entry registered under the given 10-digit NIP. "
        "Results (including absence) are cached; upstream failures are not."
    ),
)
async def get_company(
    request: Request,
    response: Response,
    nip: Annotated[str, Path(description="10-digit NIP (digits only).")],
    uc: Annotated[FindCompanyByNip, Depends(get_find_company_uc)],
) -> SuccessEnvelope[CompanyHTTP] | JSONResponse:
    """Look up a company by NIP."""
    trace_id = getattr(request.state, "request_id", None)

    if not _NIP_PATH_RE.fullmatch(nip):
        logger.info("companies.nip_rejected", extra={"extra": {"length": len(nip)}})
        return BaseRouter.send_error(
            presenter.present_not_found(_not_found_message(nip), trace_id=trace_id)
        )

    try:
        record = await uc.execute(nip)
    except CompanyNotFound as exc:
        return BaseRouter.send_error(
            presenter.present_not_found(
                str(exc) or _not_found_message(nip),
                trace_id=trace_id,
            )
        )
    except RegistryUnavailable as exc:
        return BaseRouter.send_error(presenter.present_unavailable(exc, trace_id=trace_id))

    result = presenter.present_company(record, trace_id=trace_id)
    presenter.apply_headers(response, result)
    return result.body  # type: ignore[return-value]
