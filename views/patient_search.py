"""
Patient search-and-pagination view

Holds the state behind the dashboard's patient table: the raw and debounced
search terms, the last fetched page, a loading flag and an error message.
Typing is debounced; submit, page clicks and clearing fetch immediately.
Fetches are neither queued nor cancelled, so the last response to resolve
wins.
"""

import logging
from typing import Optional

from schemas.pagination import PaginatedResult
from schemas.patient import PatientSummary
from services.patients_api_client import GENERIC_ERROR, PatientsApiClient, PatientsApiError
from utils.debounce import Debouncer
from views.templating import render_fragment
from views.url_state import UrlState

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 20
DEFAULT_DEBOUNCE_SECONDS = 0.3


class PatientSearchView:
    def __init__(
        self,
        initial_data: PaginatedResult[PatientSummary],
        client: PatientsApiClient,
        url_state: UrlState,
        limit: int = DEFAULT_LIMIT,
        debounce_delay: float = DEFAULT_DEBOUNCE_SECONDS,
        skeleton_rows: int = 5,
    ):
        self.client = client
        self.url_state = url_state
        self.limit = limit
        self.skeleton_rows = skeleton_rows

        # Seeded with the server-rendered first page
        self.data = initial_data
        self.loading = False
        self.error: Optional[str] = None
        self.search_term = url_state.search
        self.debounced_search_term = self.search_term

        self._debouncer = Debouncer(debounce_delay, self.settle_search)

    # ------------------------------------------
    # Input
    # ------------------------------------------
    def set_search_term(self, term: str) -> None:
        """Keystroke: update the raw term and restart the quiet window"""
        self.search_term = term
        self._debouncer.trigger(term)

    async def settle_search(self, term: str) -> bool:
        """The debounce window closed on `term`; fetch page 1 unless the URL already holds it"""
        self.debounced_search_term = term
        if term == self.url_state.search:
            return False
        await self.fetch_patients(1, term)
        return True

    async def submit(self) -> None:
        await self.fetch_patients(1, self.search_term)

    async def change_page(self, page: int) -> None:
        await self.fetch_patients(page, self.debounced_search_term)

    async def clear_search(self) -> None:
        self.search_term = ""
        await self.fetch_patients(1, "")

    async def navigate(self, url: str) -> None:
        """Browser navigation (back/forward): reload whatever the URL holds"""
        self.url_state.navigate(url)
        page, search = self.url_state.read()
        self.search_term = search
        self.debounced_search_term = search
        await self.fetch_patients(page, search)

    # ------------------------------------------
    # Fetching
    # ------------------------------------------
    async def fetch_patients(self, page: int, search: Optional[str] = None) -> None:
        self.loading = True
        self.error = None
        try:
            result = await self.client.list_patients(page, self.limit, search or None)
        except PatientsApiError as exc:
            self.error = exc.message or GENERIC_ERROR
        except Exception:
            logger.exception("Unexpected error fetching patients")
            self.error = GENERIC_ERROR
        else:
            self.data = result
            self.url_state.push(page, search)
        finally:
            self.loading = False

    async def wait_idle(self) -> None:
        await self._debouncer.wait()

    async def close(self) -> None:
        """Teardown: drop any pending debounce timer"""
        self._debouncer.cancel()

    # ------------------------------------------
    # Rendering
    # ------------------------------------------
    def render(self) -> str:
        return render_fragment(
            "partials/patient_table.html",
            result=self.data,
            loading=self.loading,
            error=self.error,
            search=self.url_state.search,
            skeleton_rows=self.skeleton_rows,
        )
