"""
Visit mutation actions
"""

import logging
from typing import Mapping

from pydantic import ValidationError

from actions.results import (
    DASHBOARD_PATH,
    ActionResult,
    field_error_result,
    form_error,
    patient_path,
    success,
)
from schemas.forms import VisitForm, field_errors
from services.patient_service import PatientService

logger = logging.getLogger(__name__)

VISIT_FORM_FIELDS = (
    "patient_id",
    "visit_id",
    "date",
    "complaint",
    "exam_findings",
    "current_treatment",
    "homeopathic_treatment",
)


def _read_form(values: Mapping) -> VisitForm:
    return VisitForm.model_validate(
        {f: values.get(f) for f in VISIT_FORM_FIELDS if values.get(f) is not None}
    )


async def add_visit_action(service: PatientService, values: Mapping) -> ActionResult:
    try:
        form = _read_form(values)
    except ValidationError as exc:
        return field_error_result(field_errors(exc))

    try:
        visit = await service.add_visit(form.patient_id, form.visit_data())
    except Exception:
        logger.exception("Failed to add visit for patient %s", form.patient_id)
        return form_error("Could not add the visit.")

    # The visit count and last visit date on the list change too
    return success([patient_path(form.patient_id), DASHBOARD_PATH], visit=visit)


async def update_visit_action(service: PatientService, values: Mapping) -> ActionResult:
    try:
        form = _read_form(values)
    except ValidationError as exc:
        return field_error_result(field_errors(exc))

    if not form.visit_id:
        return form_error("Visit id is missing.")

    try:
        visit = await service.update_visit(form.patient_id, form.visit_id, form.visit_data())
    except Exception:
        logger.exception("Failed to update visit %s", form.visit_id)
        return form_error("Could not update the visit.")

    return success([patient_path(form.patient_id), DASHBOARD_PATH], visit=visit)


async def delete_visit_action(
    service: PatientService, patient_id: str, visit_id: str
) -> ActionResult:
    try:
        await service.delete_visit(patient_id, visit_id)
    except Exception:
        logger.exception("Failed to delete visit %s", visit_id)
        return form_error("Could not delete the visit.")

    return success([patient_path(patient_id), DASHBOARD_PATH])
