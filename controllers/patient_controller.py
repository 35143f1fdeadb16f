"""
Patient JSON API controller
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from database.connection import get_db
from services.exceptions import InvalidIdentifierError
from services.patient_service import PatientService

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_int(value: Optional[str], default: int) -> Optional[int]:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return None


def _server_error(request: Request, exc: Exception) -> JSONResponse:
    content = {"error": "Internal server error"}
    if not request.app.state.config.is_production:
        content["details"] = f"{type(exc).__name__}: {exc}"
    return JSONResponse(content, status_code=500)


@router.get("")
async def list_patients(
    request: Request,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """
    List patient summaries with pagination and optional name search
    """
    config = request.app.state.config
    page_num = _parse_int(page, 1)
    page_size = _parse_int(limit, config.DEFAULT_PAGE_SIZE)
    search = (search or "").strip() or None

    logger.debug("Patient list request: page=%s limit=%s search=%r", page, limit, search)

    if (
        page_num is None
        or page_size is None
        or page_num < 1
        or page_size < 1
        or page_size > config.MAX_PAGE_SIZE
    ):
        return JSONResponse({"error": "Invalid pagination parameters"}, status_code=400)

    try:
        result = await PatientService(db).get_patients_paginated(page_num, page_size, search)
    except Exception as exc:
        logger.exception("Error listing patients")
        return _server_error(request, exc)

    logger.debug(
        "Patient list response: total=%s pages=%s rows=%s",
        result.pagination.total,
        result.pagination.total_pages,
        len(result.data),
    )
    response = JSONResponse(result.model_dump(by_alias=True))
    response.headers["Cache-Control"] = config.LIST_CACHE_CONTROL
    return response


@router.get("/{patient_id}")
async def get_patient(
    patient_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    """
    Get patient details with the full visit history
    """
    try:
        patient = await PatientService(db).get_patient_by_id(patient_id)
    except InvalidIdentifierError:
        return JSONResponse({"error": "Invalid identifier"}, status_code=400)
    except Exception as exc:
        logger.exception("Error loading patient %s", patient_id)
        return _server_error(request, exc)

    if patient is None:
        return JSONResponse({"error": "Patient not found"}, status_code=404)

    return JSONResponse(patient.model_dump(by_alias=True))
