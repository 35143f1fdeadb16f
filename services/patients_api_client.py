"""
HTTP client for the patient list endpoint
"""

import logging
from typing import Optional

import httpx

from schemas.pagination import PaginatedResult
from schemas.patient import PatientSummary

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Error fetching patients"


class PatientsApiError(Exception):
    """The list endpoint failed; `message` is safe to show to the user"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class PatientsApiClient:
    def __init__(self, client: httpx.AsyncClient, path: str = "/api/patients"):
        self.client = client
        self.path = path

    async def list_patients(
        self, page: int, limit: int, search: Optional[str] = None
    ) -> PaginatedResult[PatientSummary]:
        params = {"page": str(page), "limit": str(limit)}
        if search:
            params["search"] = search

        try:
            response = await self.client.get(self.path, params=params)
        except httpx.HTTPError as exc:
            logger.error("Patient list request failed: %s", exc)
            raise PatientsApiError(GENERIC_ERROR) from exc

        if response.is_success:
            return PaginatedResult[PatientSummary].model_validate(response.json())

        try:
            message = response.json().get("error") or GENERIC_ERROR
        except ValueError:
            message = GENERIC_ERROR
        logger.warning("Patient list returned %s: %s", response.status_code, message)
        raise PatientsApiError(message, status_code=response.status_code)


def client_for_app(app, base_url: Optional[str] = None) -> httpx.AsyncClient:
    """
    HTTP client for the list endpoint: over the network when `base_url` is
    set, otherwise in-process against the running FastAPI app
    """
    if base_url:
        return httpx.AsyncClient(base_url=base_url, timeout=10.0)
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://clinic")
