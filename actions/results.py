"""
Result shapes returned by the mutation actions
"""

from typing import Any, Dict, List

DASHBOARD_PATH = "/dashboard"

ActionResult = Dict[str, Any]


def patient_path(patient_id) -> str:
    return f"/patients/{patient_id}"


def success(revalidate: List[str], **payload) -> ActionResult:
    """`revalidate` lists the views made stale by the mutation"""
    return {"success": True, "revalidate": revalidate, **payload}


def form_error(message: str) -> ActionResult:
    return {"errors": {"_form": [message]}}


def field_error_result(errors: Dict[str, List[str]]) -> ActionResult:
    return {"errors": errors}
