"""
Patient mutation actions

Each action validates its form values, calls the patient service and
reports which views went stale. Storage errors are logged and replaced by a
single user-facing message.
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
from schemas.forms import PatientForm, field_errors
from services.patient_service import PatientService

logger = logging.getLogger(__name__)

PATIENT_FIELDS = ("id", "first_name", "last_name", "dob", "phone")


def _read_form(values: Mapping, with_id: bool = False) -> PatientForm:
    fields = PATIENT_FIELDS if with_id else PATIENT_FIELDS[1:]
    return PatientForm.model_validate({f: values.get(f) for f in fields})


async def create_patient_action(service: PatientService, values: Mapping) -> ActionResult:
    try:
        form = _read_form(values)
    except ValidationError as exc:
        return field_error_result(field_errors(exc))

    try:
        patient = await service.create_patient(
            form.first_name, form.last_name, form.dob, form.phone
        )
    except Exception:
        logger.exception("Failed to create patient")
        return form_error("Could not create the patient.")

    return success([DASHBOARD_PATH], patient_id=patient.id)


async def update_patient_action(service: PatientService, values: Mapping) -> ActionResult:
    try:
        form = _read_form(values, with_id=True)
    except ValidationError as exc:
        return field_error_result(field_errors(exc))

    if not form.id:
        return form_error("Patient id is missing.")

    try:
        patient = await service.update_patient(
            form.id, form.first_name, form.last_name, form.dob, form.phone
        )
    except Exception:
        logger.exception("Failed to update patient %s", form.id)
        return form_error("Could not update the patient.")

    return success([patient_path(form.id), DASHBOARD_PATH], patient=patient)


async def delete_patient_action(service: PatientService, patient_id: str) -> ActionResult:
    try:
        await service.delete_patient(patient_id)
    except Exception:
        logger.exception("Failed to delete patient %s", patient_id)
        return form_error("Could not delete the patient.")

    return success([DASHBOARD_PATH, patient_path(patient_id)], redirect=DASHBOARD_PATH)
