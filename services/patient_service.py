"""
Patient persistence gateway

Translates between the patients/visits tables and the schemas in
`schemas/`. Every identifier arrives as a string and is parsed here.
"""

import logging
from datetime import date
from typing import Dict, List, Optional, Union

from sqlalchemy import case, delete, func, select, text
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from models.patient import Patient
from models.visit import Visit
from schemas.pagination import PaginatedResult, PaginationInfo
from schemas.patient import PatientResponse, PatientSummary
from schemas.visit import VisitResponse
from services.exceptions import (
    InvalidIdentifierError,
    PatientNotFoundError,
    VisitNotFoundError,
)
from utils.dates import parse_iso_date

logger = logging.getLogger(__name__)

VISIT_FIELDS = ("complaint", "exam_findings", "current_treatment", "homeopathic_treatment")

_SEARCH_PREDICATE = """
WHERE LOWER(p.first_name) LIKE :pattern ESCAPE '\\'
   OR LOWER(p.last_name) LIKE :pattern ESCAPE '\\'
   OR LOWER(p.first_name || ' ' || p.last_name) LIKE :pattern ESCAPE '\\'
"""

_SUMMARY_SQL = """
SELECT p.id, p.first_name, p.last_name, p.date_of_birth, p.phone,
       COUNT(v.id) AS visit_count,
       MAX(v.date) AS last_visit_date
FROM patients p
LEFT JOIN visits v ON v.patient_id = p.id
{where}
GROUP BY p.id, p.first_name, p.last_name, p.date_of_birth, p.phone
ORDER BY CASE WHEN MAX(v.date) IS NULL THEN 1 ELSE 0 END,
         MAX(v.date) DESC,
         p.last_name, p.first_name, p.id
LIMIT :limit OFFSET :offset
"""

_COUNT_SQL = "SELECT COUNT(*) FROM patients p {where}"


def parse_id(value: Union[str, int, None]) -> int:
    """Parse a string identifier into the integer storage key"""
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidIdentifierError(value)


def _like_pattern(search: str) -> str:
    escaped = search.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _as_date(value: Union[str, date, None]) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    return parse_iso_date(value)


class PatientService:
    """Patient and visit storage operations bound to one session"""

    def __init__(self, session: AsyncSession):
        self.session = session

    # ------------------------------------------
    # Paginated summary list
    # ------------------------------------------
    async def get_patients_paginated(
        self, page: int = 1, limit: int = 20, search: Optional[str] = None
    ) -> PaginatedResult[PatientSummary]:
        """
        Two-tier strategy: the filtered raw aggregate query first, then one
        retry through the basic ORM path with the filter dropped. A failure
        of the basic path propagates.
        """
        search = (search or "").strip() or None
        try:
            return await self._search_summaries(page, limit, search)
        except Exception:
            logger.warning(
                "Summary query failed (search=%r), falling back to basic listing",
                search,
                exc_info=True,
            )
            await self.session.rollback()
        return await self._basic_summaries(page, limit)

    async def _search_summaries(
        self, page: int, limit: int, search: Optional[str]
    ) -> PaginatedResult[PatientSummary]:
        params: Dict[str, object] = {"limit": limit, "offset": (page - 1) * limit}
        where = ""
        if search:
            where = _SEARCH_PREDICATE
            params["pattern"] = _like_pattern(search)

        count_params = {k: v for k, v in params.items() if k == "pattern"}
        total = (
            await self.session.execute(text(_COUNT_SQL.format(where=where)), count_params)
        ).scalar_one()

        result = await self.session.execute(text(_SUMMARY_SQL.format(where=where)), params)
        rows = result.mappings().all()

        return PaginatedResult[PatientSummary](
            data=[PatientSummary.from_row(row) for row in rows],
            pagination=PaginationInfo.build(page, limit, int(total)),
        )

    async def _basic_summaries(self, page: int, limit: int) -> PaginatedResult[PatientSummary]:
        stats = (
            select(
                Visit.patient_id.label("patient_id"),
                func.count(Visit.id).label("visit_count"),
                func.max(Visit.date).label("last_visit_date"),
            )
            .group_by(Visit.patient_id)
            .subquery()
        )
        query = (
            select(
                Patient.id,
                Patient.first_name,
                Patient.last_name,
                Patient.date_of_birth,
                Patient.phone,
                func.coalesce(stats.c.visit_count, 0).label("visit_count"),
                stats.c.last_visit_date,
            )
            .outerjoin(stats, stats.c.patient_id == Patient.id)
            .order_by(
                case((stats.c.last_visit_date.is_(None), 1), else_=0),
                stats.c.last_visit_date.desc(),
                Patient.last_name,
                Patient.first_name,
                Patient.id,
            )
            .offset((page - 1) * limit)
            .limit(limit)
        )

        total = (await self.session.execute(select(func.count(Patient.id)))).scalar_one()
        rows = (await self.session.execute(query)).mappings().all()

        return PaginatedResult[PatientSummary](
            data=[PatientSummary.from_row(row) for row in rows],
            pagination=PaginationInfo.build(page, limit, int(total)),
        )

    # ------------------------------------------
    # Patients
    # ------------------------------------------
    async def get_patients(self) -> List[PatientResponse]:
        result = await self.session.execute(
            select(Patient)
            .options(selectinload(Patient.visits))
            .order_by(Patient.last_name, Patient.first_name, Patient.id)
        )
        return [PatientResponse.from_model(p) for p in result.scalars().all()]

    async def _load_patient(self, pk: int) -> Optional[Patient]:
        result = await self.session.execute(
            select(Patient)
            .options(selectinload(Patient.visits))
            .where(Patient.id == pk)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_patient_by_id(self, patient_id: str) -> Optional[PatientResponse]:
        patient = await self._load_patient(parse_id(patient_id))
        if patient is None:
            return None
        return PatientResponse.from_model(patient)

    async def create_patient(
        self,
        first_name: str,
        last_name: str,
        date_of_birth: Union[str, date, None] = None,
        phone: Optional[str] = None,
    ) -> PatientResponse:
        patient = Patient(
            first_name=first_name,
            last_name=last_name,
            date_of_birth=_as_date(date_of_birth),
            phone=phone or None,
        )
        self.session.add(patient)
        await self.session.commit()
        await self.session.refresh(patient)

        logger.info("Created patient %s", patient.id)
        return PatientResponse.from_model(patient, visits=[])

    async def update_patient(
        self,
        patient_id: str,
        first_name: str,
        last_name: str,
        date_of_birth: Union[str, date, None] = None,
        phone: Optional[str] = None,
    ) -> PatientResponse:
        """Update a patient and return it with its current visit list"""
        pk = parse_id(patient_id)
        patient = await self._load_patient(pk)
        if patient is None:
            raise PatientNotFoundError()

        patient.first_name = first_name
        patient.last_name = last_name
        patient.date_of_birth = _as_date(date_of_birth)
        patient.phone = phone or None
        await self.session.commit()

        return PatientResponse.from_model(await self._load_patient(pk))

    async def delete_patient(self, patient_id: str) -> None:
        """Delete a patient's visits, then the patient"""
        pk = parse_id(patient_id)
        patient = await self.session.get(Patient, pk)
        if patient is None:
            raise PatientNotFoundError()

        await self.session.execute(delete(Visit).where(Visit.patient_id == pk))
        await self.session.execute(delete(Patient).where(Patient.id == pk))
        await self.session.commit()
        logger.info("Deleted patient %s and their visits", pk)

    # ------------------------------------------
    # Visits
    # ------------------------------------------
    async def list_visits(self, patient_id: str) -> List[VisitResponse]:
        result = await self.session.execute(
            select(Visit)
            .where(Visit.patient_id == parse_id(patient_id))
            .order_by(Visit.date.desc(), Visit.id.desc())
        )
        return [VisitResponse.from_model(v) for v in result.scalars().all()]

    async def add_visit(self, patient_id: str, visit_data: Dict[str, str]) -> VisitResponse:
        pk = parse_id(patient_id)
        if await self.session.get(Patient, pk) is None:
            raise PatientNotFoundError()

        visit = Visit(
            patient_id=pk,
            date=_as_date(visit_data["date"]),
            **{field: visit_data.get(field) or "" for field in VISIT_FIELDS},
        )
        self.session.add(visit)
        await self.session.commit()
        await self.session.refresh(visit)

        logger.info("Added visit %s for patient %s", visit.id, pk)
        return VisitResponse.from_model(visit)

    async def _get_owned_visit(self, patient_id: str, visit_id: str) -> Visit:
        result = await self.session.execute(
            select(Visit).where(
                Visit.id == parse_id(visit_id),
                Visit.patient_id == parse_id(patient_id),
            )
        )
        visit = result.scalar_one_or_none()
        if visit is None:
            raise VisitNotFoundError()
        return visit

    async def update_visit(
        self, patient_id: str, visit_id: str, visit_data: Dict[str, str]
    ) -> VisitResponse:
        visit = await self._get_owned_visit(patient_id, visit_id)

        if visit_data.get("date"):
            visit.date = _as_date(visit_data["date"])
        for field in VISIT_FIELDS:
            if field in visit_data:
                setattr(visit, field, visit_data[field] or "")

        await self.session.commit()
        await self.session.refresh(visit)
        return VisitResponse.from_model(visit)

    async def delete_visit(self, patient_id: str, visit_id: str) -> None:
        visit = await self._get_owned_visit(patient_id, visit_id)
        await self.session.delete(visit)
        await self.session.commit()
        logger.info("Deleted visit %s", visit.id)
