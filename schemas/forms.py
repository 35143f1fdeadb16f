"""
Form schemas validated by the mutation actions
"""

from pydantic import BaseModel, Field, ValidationError, field_validator
from typing import Dict, List, Optional

from utils.dates import parse_form_date


def _blank_to_none(value):
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class PatientForm(BaseModel):
    id: Optional[str] = None
    first_name: str = Field(..., min_length=2)
    last_name: str = Field(..., min_length=2)
    dob: Optional[str] = None  # normalised to YYYY-MM-DD
    phone: Optional[str] = Field(None, max_length=30)

    @field_validator("first_name", "last_name", mode="before")
    def _strip_names(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("id", "phone", mode="before")
    def _optional_text(cls, v):
        return _blank_to_none(v)

    @field_validator("dob", mode="before")
    def _normalise_dob(cls, v):
        v = _blank_to_none(v)
        if v is None:
            return None
        try:
            return parse_form_date(v).isoformat()
        except ValueError:
            raise ValueError("Invalid date of birth")


class VisitForm(BaseModel):
    patient_id: str = Field(..., min_length=1)
    visit_id: Optional[str] = None
    date: str  # normalised to YYYY-MM-DD
    complaint: str = ""
    exam_findings: str = ""
    current_treatment: str = ""
    homeopathic_treatment: str = ""

    @field_validator("visit_id", mode="before")
    def _optional_id(cls, v):
        return _blank_to_none(v)

    @field_validator("complaint", "exam_findings", "current_treatment", "homeopathic_treatment", mode="before")
    def _text_or_empty(cls, v):
        return "" if v is None else v

    @field_validator("date", mode="before")
    def _normalise_date(cls, v):
        v = _blank_to_none(v)
        if v is None:
            raise ValueError("Date is required")
        try:
            return parse_form_date(v).isoformat()
        except ValueError:
            raise ValueError("Invalid visit date")

    def visit_data(self) -> Dict[str, str]:
        return self.model_dump(exclude={"patient_id", "visit_id"})


def field_errors(exc: ValidationError) -> Dict[str, List[str]]:
    """Flatten a ValidationError into {field: [messages]}"""
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else "_form"
        message = error["msg"]
        # "Value error, Invalid visit date" -> "Invalid visit date"
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field, []).append(message)
    return errors
