import asyncio

import pytest
from httpx import ASGITransport, AsyncClient

from schemas.pagination import PaginatedResult, PaginationInfo
from schemas.patient import PatientSummary
from services.patients_api_client import PatientsApiClient, PatientsApiError
from views.patient_search import PatientSearchView
from views.url_state import UrlState


def envelope(names, page=1, limit=20, total=None):
    data = []
    for i, name in enumerate(names, start=1):
        first, last = name.split(" ")
        data.append(
            PatientSummary(id=str(i), name=name, first_name=first, last_name=last, visit_count=i)
        )
    total = len(names) if total is None else total
    return PaginatedResult[PatientSummary](
        data=data, pagination=PaginationInfo.build(page, limit, total)
    )


class FakeClient:
    def __init__(self, responses=None, error=None):
        self.requests = []
        self.responses = responses or {}
        self.error = error

    async def list_patients(self, page, limit, search=None):
        self.requests.append((page, limit, search))
        if self.error:
            raise self.error
        return self.responses.get(search, envelope([]))


def make_view(client, query="", delay=0.02):
    return PatientSearchView(
        envelope(["Juan Perez", "Maria Garcia"]),
        client,
        UrlState(query),
        debounce_delay=delay,
    )


async def test_seeded_without_fetch():
    client = FakeClient()
    view = make_view(client, "page=1&search=juan")

    assert client.requests == []
    assert view.search_term == "juan"
    assert view.debounced_search_term == "juan"
    assert len(view.data.data) == 2


async def test_typing_fetches_once_after_debounce():
    client = FakeClient({"mar": envelope(["Maria Garcia"])})
    view = make_view(client)

    for term in ("m", "ma", "mar"):
        view.set_search_term(term)
    assert client.requests == []

    await view.wait_idle()

    assert client.requests == [(1, 20, "mar")]
    assert view.debounced_search_term == "mar"
    assert [p.name for p in view.data.data] == ["Maria Garcia"]
    assert view.url_state.url == "/dashboard?page=1&search=mar"


async def test_debounced_term_matching_url_does_not_fetch():
    client = FakeClient()
    view = make_view(client, "search=juan")

    view.set_search_term("juan")
    await view.wait_idle()

    assert client.requests == []


async def test_settle_search_reports_whether_it_fetched():
    client = FakeClient()
    view = make_view(client, "search=juan")

    assert await view.settle_search("juan") is False
    assert await view.settle_search("ana") is True
    assert client.requests == [(1, 20, "ana")]


async def test_explicit_actions_fetch_immediately():
    client = FakeClient()
    view = make_view(client)

    view.search_term = "juan"
    await view.submit()
    await view.change_page(3)
    await view.clear_search()

    assert client.requests == [(1, 20, "juan"), (3, 20, None), (1, 20, None)]
    assert view.search_term == ""
    assert view.url_state.url == "/dashboard?page=1"


async def test_failure_keeps_previous_data_and_sets_error():
    client = FakeClient(error=PatientsApiError("Invalid pagination parameters", 400))
    view = make_view(client)
    before = view.data

    await view.change_page(2)

    assert view.error == "Invalid pagination parameters"
    assert view.data is before
    assert view.loading is False
    assert view.url_state.history == []


async def test_unexpected_failure_uses_generic_message():
    client = FakeClient(error=RuntimeError("socket closed"))
    view = make_view(client)

    await view.submit()

    assert view.error == "Error fetching patients"


async def test_error_cleared_on_next_success():
    client = FakeClient(error=PatientsApiError("boom"))
    view = make_view(client)
    await view.submit()

    client.error = None
    await view.submit()

    assert view.error is None


async def test_close_cancels_pending_debounce():
    client = FakeClient()
    view = make_view(client)

    view.set_search_term("ana")
    await view.close()
    await asyncio.sleep(0.05)

    assert client.requests == []
    assert view.debounced_search_term == ""


async def test_navigate_loads_url_state():
    client = FakeClient()
    view = make_view(client)

    await view.navigate("/dashboard?page=2&search=ana")

    assert client.requests == [(2, 20, "ana")]
    assert view.search_term == "ana"


# ------------------------------------------
# Rendering
# ------------------------------------------
def test_render_rows_and_no_pagination_for_one_page():
    html = make_view(FakeClient()).render()

    assert "Juan Perez" in html
    assert 'href="/patients/1"' in html
    assert 'class="pagination"' not in html


def test_render_skeleton_while_loading():
    view = make_view(FakeClient())
    view.loading = True

    html = view.render()

    assert html.count('class="skeleton-row"') == 5
    assert "Juan Perez" not in html


@pytest.mark.parametrize(
    "search,message",
    [("zzz", "No patients match that name."), ("", "No patients registered yet.")],
)
def test_render_empty_message_depends_on_search(search, message):
    view = PatientSearchView(envelope([]), FakeClient(), UrlState(f"search={search}"))

    assert message in view.render()


def test_render_page_past_the_end_is_not_an_empty_registry():
    view = PatientSearchView(envelope([], page=4, total=3), FakeClient(), UrlState("page=4"))

    html = view.render()

    assert "No patients on this page." in html
    assert "No patients registered yet." not in html


def test_render_pagination_window():
    view = PatientSearchView(
        envelope(["Juan Perez"], page=6, limit=1, total=12), FakeClient(), UrlState()
    )

    html = view.render()

    assert "Showing 6 to 6 of 12 patients" in html
    assert html.count("...") == 2
    assert 'data-page="12"' in html
    assert 'data-page="3"' not in html


def test_render_error_alongside_previous_data():
    view = make_view(FakeClient())
    view.error = "Error fetching patients"

    html = view.render()

    assert "Error fetching patients" in html
    assert "Maria Garcia" in html


# ------------------------------------------
# Against the real endpoint
# ------------------------------------------
async def test_view_against_list_endpoint(app, make_patient):
    await make_patient("Juan", "Perez", visit_dates=["2024-03-15"])
    await make_patient("Maria", "Garcia")

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        client = PatientsApiClient(http)
        initial = await client.list_patients(1, 20)
        view = PatientSearchView(initial, client, UrlState(), debounce_delay=0.01)

        view.set_search_term("garcia")
        await view.wait_idle()
        assert [p.name for p in view.data.data] == ["Maria Garcia"]

        view.limit = 500
        await view.change_page(1)
        assert view.error == "Invalid pagination parameters"
        assert [p.name for p in view.data.data] == ["Maria Garcia"]

        await view.close()
