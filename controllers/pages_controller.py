"""
Server-rendered pages: login stub, dashboard and patient detail
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from actions.patient_actions import (
    create_patient_action,
    delete_patient_action,
    update_patient_action,
)
from actions.results import DASHBOARD_PATH, patient_path
from actions.visit_actions import add_visit_action, delete_visit_action, update_visit_action
from database.connection import get_db
from schemas.pagination import PaginatedResult, PaginationInfo
from schemas.patient import PatientSummary
from services.exceptions import InvalidIdentifierError
from services.patient_service import PatientService
from services.patients_api_client import PatientsApiClient, client_for_app
from views.patient_search import PatientSearchView
from views.url_state import UrlState
from views.templating import templates

logger = logging.getLogger(__name__)

router = APIRouter()


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=303)


def not_found_page(request: Request, message: Optional[str] = None):
    return templates.TemplateResponse(
        request, "not_found.html", {"message": message}, status_code=404
    )


# ------------------------------------------
# Login (no credential check)
# ------------------------------------------
@router.get("/")
async def login_page(request: Request):
    return templates.TemplateResponse(request, "login.html", {})


@router.post("/login")
async def login():
    return _redirect(DASHBOARD_PATH)


# ------------------------------------------
# Dashboard
# ------------------------------------------
async def _render_dashboard(
    request: Request,
    service: PatientService,
    form_values=None,
    form_errors=None,
    status_code: int = 200,
):
    if form_errors:
        # A failed mutation may leave the transaction unusable
        await service.session.rollback()
    config = request.app.state.config
    search = (request.query_params.get("search") or "").strip()
    try:
        page = max(int(request.query_params.get("page", 1)), 1)
    except ValueError:
        page = 1

    result = await service.get_patients_paginated(page, config.DEFAULT_PAGE_SIZE, search)
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "result": result,
            "search": search,
            "loading": False,
            "error": None,
            "skeleton_rows": 5,
            "debounce_ms": round(config.SEARCH_DEBOUNCE_SECONDS * 1000),
            "form_values": form_values or {},
            "form_errors": form_errors,
        },
        status_code=status_code,
    )


@router.get("/dashboard")
async def dashboard(request: Request, db: AsyncSession = Depends(get_db)):
    return await _render_dashboard(request, PatientService(db))


# ------------------------------------------
# Dashboard search fragment
# ------------------------------------------
# Element ids the dashboard's htmx controls report in the HX-Trigger header
SEARCH_INPUT_ID = "search-input"
SEARCH_FORM_ID = "search-form"
SEARCH_CLEAR_ID = "search-clear"


@router.get("/dashboard/patients")
async def patient_search_fragment(request: Request):
    """
    Table fragment for the dashboard search.

    Debounced keystrokes, submits, clears and page links all land here; the
    search view fetches through the JSON list endpoint and renders the
    table. The browser's current URL (HX-Current-URL) is the view's URL
    state, so a settled term that matches it does not fetch (204).
    """
    config = request.app.state.config
    trigger = request.headers.get("HX-Trigger")
    term = request.query_params.get("search", "")
    url_state = UrlState.from_url(request.headers.get("HX-Current-URL") or DASHBOARD_PATH)
    url_state.path = DASHBOARD_PATH

    empty = PaginatedResult[PatientSummary](
        data=[], pagination=PaginationInfo.build(1, config.DEFAULT_PAGE_SIZE, 0)
    )
    async with client_for_app(request.app, config.PATIENTS_API_URL) as http:
        view = PatientSearchView(
            empty,
            PatientsApiClient(http),
            url_state,
            limit=config.DEFAULT_PAGE_SIZE,
            debounce_delay=config.SEARCH_DEBOUNCE_SECONDS,
        )
        try:
            if trigger == SEARCH_INPUT_ID:
                view.search_term = term
                if not await view.settle_search(term):
                    return Response(status_code=204)
            elif trigger == SEARCH_FORM_ID:
                view.search_term = term
                await view.submit()
            elif trigger == SEARCH_CLEAR_ID:
                await view.clear_search()
            else:
                await view.navigate(f"{DASHBOARD_PATH}?{request.url.query}")
        finally:
            await view.close()

    response = HTMLResponse(view.render())
    if view.error:
        # Only the alert is swapped in; the previous table stays on screen
        response.headers["HX-Retarget"] = "#search-error"
        response.headers["HX-Reselect"] = "#search-error"
        response.headers["HX-Reswap"] = "outerHTML"
    else:
        response.headers["HX-Push-Url"] = view.url_state.url
    return response


@router.post("/patients")
async def create_patient(request: Request, db: AsyncSession = Depends(get_db)):
    service = PatientService(db)
    values = dict(await request.form())
    result = await create_patient_action(service, values)
    if result.get("success"):
        return _redirect(patient_path(result["patient_id"]))
    return await _render_dashboard(
        request, service, form_values=values, form_errors=result["errors"], status_code=400
    )


# ------------------------------------------
# Patient detail
# ------------------------------------------
async def _render_detail(
    request: Request,
    service: PatientService,
    patient_id: str,
    error_target: Optional[str] = None,
    form_values=None,
    form_errors=None,
    status_code: int = 200,
):
    if form_errors:
        await service.session.rollback()
    try:
        patient = await service.get_patient_by_id(patient_id)
    except InvalidIdentifierError:
        patient = None
    if patient is None:
        return not_found_page(request, "Patient not found.")

    return templates.TemplateResponse(
        request,
        "patient_detail.html",
        {
            "patient": patient,
            "patient_values": {
                "first_name": patient.first_name,
                "last_name": patient.last_name,
                "dob": patient.dob,
                "phone": patient.phone,
            },
            "error_target": error_target,
            "form_values": form_values or {},
            "form_errors": form_errors,
        },
        status_code=status_code,
    )


@router.get("/patients/{patient_id}")
async def patient_detail(patient_id: str, request: Request, db: AsyncSession = Depends(get_db)):
    return await _render_detail(request, PatientService(db), patient_id)


@router.post("/patients/{patient_id}/edit")
async def edit_patient(patient_id: str, request: Request, db: AsyncSession = Depends(get_db)):
    service = PatientService(db)
    values = dict(await request.form())
    values["id"] = patient_id
    result = await update_patient_action(service, values)
    if result.get("success"):
        return _redirect(patient_path(patient_id))
    return await _render_detail(
        request, service, patient_id, "edit_patient", values, result["errors"], 400
    )


@router.post("/patients/{patient_id}/delete")
async def delete_patient(patient_id: str, request: Request, db: AsyncSession = Depends(get_db)):
    service = PatientService(db)
    result = await delete_patient_action(service, patient_id)
    if result.get("success"):
        return _redirect(result["redirect"])
    return await _render_detail(
        request, service, patient_id, "delete_patient", None, result["errors"], 400
    )


# ------------------------------------------
# Visits
# ------------------------------------------
@router.post("/patients/{patient_id}/visits")
async def add_visit(patient_id: str, request: Request, db: AsyncSession = Depends(get_db)):
    service = PatientService(db)
    values = dict(await request.form())
    values["patient_id"] = patient_id
    result = await add_visit_action(service, values)
    if result.get("success"):
        return _redirect(patient_path(patient_id))
    return await _render_detail(
        request, service, patient_id, "add_visit", values, result["errors"], 400
    )


@router.post("/patients/{patient_id}/visits/{visit_id}/edit")
async def edit_visit(
    patient_id: str, visit_id: str, request: Request, db: AsyncSession = Depends(get_db)
):
    service = PatientService(db)
    values = dict(await request.form())
    values.update(patient_id=patient_id, visit_id=visit_id)
    result = await update_visit_action(service, values)
    if result.get("success"):
        return _redirect(patient_path(patient_id))
    return await _render_detail(
        request, service, patient_id, f"visit-{visit_id}", values, result["errors"], 400
    )


@router.post("/patients/{patient_id}/visits/{visit_id}/delete")
async def delete_visit(
    patient_id: str, visit_id: str, request: Request, db: AsyncSession = Depends(get_db)
):
    service = PatientService(db)
    result = await delete_visit_action(service, patient_id, visit_id)
    if result.get("success"):
        return _redirect(patient_path(patient_id))
    logger.info("Visit %s could not be deleted for patient %s", visit_id, patient_id)
    return await _render_detail(
        request, service, patient_id, f"visit-{visit_id}", None, result["errors"], 400
    )
