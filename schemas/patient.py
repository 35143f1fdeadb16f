"""
Patient Pydantic schemas for request/response validation
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import List, Optional

from schemas.visit import VisitResponse
from utils.dates import to_iso


class PatientBase(BaseModel):
    id: str
    name: str
    first_name: str
    last_name: str
    dob: Optional[str] = None  # YYYY-MM-DD
    phone: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class PatientResponse(PatientBase):
    visits: List[VisitResponse] = []

    @classmethod
    def from_model(cls, patient, visits=None) -> "PatientResponse":
        """Build from an ORM row; `visits` defaults to the loaded relationship"""
        if visits is None:
            visits = patient.visits
        ordered = sorted(visits, key=lambda v: (v.date, v.id), reverse=True)
        return cls(
            id=str(patient.id),
            name=patient.name,
            first_name=patient.first_name or "",
            last_name=patient.last_name or "",
            dob=to_iso(patient.date_of_birth),
            phone=patient.phone or None,
            visits=[VisitResponse.from_model(v) for v in ordered],
        )


class PatientSummary(PatientBase):
    """Read-only list projection with visit aggregates"""

    visit_count: int = 0
    last_visit_date: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "PatientSummary":
        first_name = row["first_name"] or ""
        last_name = row["last_name"] or ""
        return cls(
            id=str(row["id"]),
            name=f"{first_name} {last_name}".strip(),
            first_name=first_name,
            last_name=last_name,
            dob=to_iso(row["date_of_birth"]),
            phone=row["phone"] or None,
            visit_count=int(row["visit_count"] or 0),
            last_visit_date=to_iso(row["last_visit_date"]),
        )
