from services.patient_service import PatientService


async def test_login_is_a_stub(client):
    page = await client.get("/")
    assert page.status_code == 200
    assert 'action="/login"' in page.text

    response = await client.post("/login", data={"email": "a@b.c", "password": "wrong"})

    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"


async def test_dashboard_renders_first_page(client, make_patient):
    await make_patient("Juan", "Perez", "1980-05-15", visit_dates=["2024-03-15"])

    response = await client.get("/dashboard")

    assert response.status_code == 200
    assert "Juan Perez" in response.text
    assert "15 May 1980" in response.text
    assert "15 March 2024" in response.text


async def test_dashboard_search(client, make_patient):
    await make_patient("Juan", "Perez")
    await make_patient("Maria", "Garcia")

    response = await client.get("/dashboard", params={"search": "maria"})

    assert "Maria Garcia" in response.text
    assert "Juan Perez" not in response.text


async def test_dashboard_empty_search_message(client):
    response = await client.get("/dashboard", params={"search": "nobody"})

    assert "No patients match that name." in response.text


async def test_dashboard_page_past_the_end_message(client, make_patient):
    await make_patient("Juan", "Perez")

    response = await client.get("/dashboard", params={"page": "99"})

    assert "No patients on this page." in response.text
    assert "No patients registered yet." not in response.text


async def test_create_patient_form_redirects_to_detail(client, service):
    response = await client.post(
        "/patients",
        data={"first_name": "Ana", "last_name": "Lopez", "dob": "02-03-1990", "phone": ""},
    )

    assert response.status_code == 303
    patient_id = response.headers["location"].rsplit("/", 1)[-1]
    patient = await service.get_patient_by_id(patient_id)
    assert patient.name == "Ana Lopez"
    assert patient.dob == "1990-03-02"


async def test_create_patient_form_errors(client):
    response = await client.post("/patients", data={"first_name": "A", "last_name": "Lopez"})

    assert response.status_code == 400
    assert 'data-field="first_name"' in response.text
    assert 'value="Lopez"' in response.text


async def test_patient_detail_lists_visits_newest_first(client, make_patient):
    patient = await make_patient("Juan", "Perez", visit_dates=["2023-10-01", "2024-03-15"])

    response = await client.get(f"/patients/{patient.id}")

    assert response.status_code == 200
    assert response.text.index("15 Mar 2024") < response.text.index("1 Oct 2023")


async def test_missing_patient_renders_not_found(client):
    for path in ("/patients/999", "/patients/not-a-number"):
        response = await client.get(path)
        assert response.status_code == 404
        assert "Patient not found." in response.text


async def test_unknown_route_renders_not_found(client):
    response = await client.get("/nowhere")

    assert response.status_code == 404
    assert "Not found" in response.text


async def test_edit_patient(client, service, make_patient):
    patient = await make_patient("Juan", "Perez")

    response = await client.post(
        f"/patients/{patient.id}/edit",
        data={"first_name": "Juana", "last_name": "Perez", "dob": "1981-01-01", "phone": "555"},
    )

    assert response.status_code == 303
    updated = await service.get_patient_by_id(patient.id)
    assert updated.first_name == "Juana"
    assert updated.dob == "1981-01-01"


async def test_add_edit_and_delete_visit(client, service, make_patient):
    patient = await make_patient("Juan", "Perez")

    response = await client.post(
        f"/patients/{patient.id}/visits",
        data={"date": "2024-03-15", "complaint": "Spring allergy"},
    )
    assert response.status_code == 303
    visit = (await service.list_visits(patient.id))[0]
    assert visit.complaint == "Spring allergy"

    response = await client.post(
        f"/patients/{patient.id}/visits/{visit.id}/edit",
        data={"date": "16-03-2024", "complaint": "Allergy follow-up"},
    )
    assert response.status_code == 303
    visit = (await service.list_visits(patient.id))[0]
    assert visit.date == "2024-03-16"
    assert visit.complaint == "Allergy follow-up"

    response = await client.post(f"/patients/{patient.id}/visits/{visit.id}/delete")
    assert response.status_code == 303
    assert await service.list_visits(patient.id) == []


async def test_add_visit_without_date_shows_error(client, make_patient):
    patient = await make_patient("Juan", "Perez")

    response = await client.post(f"/patients/{patient.id}/visits", data={"complaint": "x"})

    assert response.status_code == 400
    assert 'data-field="date"' in response.text


async def test_delete_patient_redirects_to_dashboard(client, service, make_patient):
    patient = await make_patient("Juan", "Perez", visit_dates=["2024-01-01"])

    response = await client.post(f"/patients/{patient.id}/delete")

    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"
    assert await service.get_patient_by_id(patient.id) is None


# ------------------------------------------
# Dashboard search fragment
# ------------------------------------------
def htmx_headers(trigger=None, current="http://test/dashboard"):
    headers = {"HX-Request": "true", "HX-Current-URL": current}
    if trigger:
        headers["HX-Trigger"] = trigger
    return headers


async def test_dashboard_wires_search_to_fragment(client):
    response = await client.get("/dashboard")

    html = response.text
    assert "htmx.org" in html
    assert 'hx-get="/dashboard/patients"' in html
    assert 'hx-trigger="input changed delay:300ms"' in html
    assert 'hx-target="#patient-search"' in html
    assert 'id="search-error"' in html
    assert 'class="skeleton-row"' in html


async def test_fragment_page_link_fetches_through_list_endpoint(client, make_patient, monkeypatch):
    for i in range(21):
        await make_patient(f"Name{i:02d}", "Perez")
    calls = []
    original = PatientService.get_patients_paginated

    async def spy(self, page, limit, search=None):
        calls.append((page, limit, search))
        return await original(self, page, limit, search)

    monkeypatch.setattr(PatientService, "get_patients_paginated", spy)

    response = await client.get("/dashboard/patients?page=2", headers=htmx_headers())

    assert response.status_code == 200
    assert calls == [(2, 20, None)]
    assert response.headers["HX-Push-Url"] == "/dashboard?page=2"
    assert "Showing 21 to 21 of 21 patients" in response.text
    assert response.text.count("data-patient-id=") == 1


async def test_fragment_settled_search_fetches_page_one(client, make_patient):
    await make_patient("Juan", "Perez")
    await make_patient("Maria", "Garcia")

    response = await client.get(
        "/dashboard/patients",
        params={"search": "maria"},
        headers=htmx_headers("search-input", "http://test/dashboard?page=3"),
    )

    assert response.status_code == 200
    assert response.headers["HX-Push-Url"] == "/dashboard?page=1&search=maria"
    assert "Maria Garcia" in response.text
    assert "Juan Perez" not in response.text


async def test_fragment_settled_search_matching_url_does_nothing(client):
    response = await client.get(
        "/dashboard/patients",
        params={"search": "maria"},
        headers=htmx_headers("search-input", "http://test/dashboard?page=1&search=maria"),
    )

    assert response.status_code == 204


async def test_fragment_clear_drops_search(client, make_patient):
    await make_patient("Juan", "Perez")

    response = await client.get(
        "/dashboard/patients",
        headers=htmx_headers("search-clear", "http://test/dashboard?page=2&search=zzz"),
    )

    assert response.headers["HX-Push-Url"] == "/dashboard?page=1"
    assert "Juan Perez" in response.text


async def test_fragment_failure_swaps_only_the_error(client, monkeypatch):
    async def broken(self, *args, **kwargs):
        raise RuntimeError("connection refused")

    monkeypatch.setattr(PatientService, "get_patients_paginated", broken)

    response = await client.get(
        "/dashboard/patients", params={"search": "ana"}, headers=htmx_headers("search-form")
    )

    assert response.status_code == 200
    assert response.headers["HX-Retarget"] == "#search-error"
    assert response.headers["HX-Reselect"] == "#search-error"
    assert "HX-Push-Url" not in response.headers
    assert "Internal server error" in response.text
