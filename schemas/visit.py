"""
Visit Pydantic schemas for request/response validation
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from utils.dates import to_iso


class VisitResponse(BaseModel):
    id: str
    patient_id: str
    date: str  # YYYY-MM-DD
    complaint: str = ""
    exam_findings: str = ""
    current_treatment: str = ""
    homeopathic_treatment: str = ""

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    @classmethod
    def from_model(cls, visit) -> "VisitResponse":
        return cls(
            id=str(visit.id),
            patient_id=str(visit.patient_id),
            date=to_iso(visit.date) or "",
            complaint=visit.complaint or "",
            exam_findings=visit.exam_findings or "",
            current_treatment=visit.current_treatment or "",
            homeopathic_treatment=visit.homeopathic_treatment or "",
        )
