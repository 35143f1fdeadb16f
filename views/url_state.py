"""
Query-string state for the patient search view

The URL is the shareable source of truth for `page` and `search`: the view
reads it on mount and navigation, and writes it after each successful fetch.
"""

from typing import List, Optional, Tuple
from urllib.parse import parse_qsl, urlencode


class UrlState:
    def __init__(self, query_string: str = "", path: str = "/dashboard"):
        self.path = path
        self.params = dict(parse_qsl(query_string.lstrip("?"), keep_blank_values=True))
        self.history: List[str] = []

    @classmethod
    def from_url(cls, url: str) -> "UrlState":
        path, _, query = url.partition("?")
        return cls(query, path=path or "/dashboard")

    @property
    def page(self) -> int:
        try:
            page = int(self.params.get("page", 1))
        except ValueError:
            return 1
        return max(page, 1)

    @property
    def search(self) -> str:
        return self.params.get("search", "")

    def read(self) -> Tuple[int, str]:
        return self.page, self.search

    def navigate(self, url: str) -> None:
        """Load state from a URL the user navigated to (back/forward, link)"""
        path, _, query = url.partition("?")
        if path:
            self.path = path
        self.params = dict(parse_qsl(query, keep_blank_values=True))

    def push(self, page: int, search: Optional[str] = None) -> str:
        """Write page/search, dropping `search` entirely when empty"""
        params = dict(self.params)
        params["page"] = str(page)
        if search:
            params["search"] = search
        else:
            params.pop("search", None)
        self.params = params
        url = self.url
        self.history.append(url)
        return url

    @property
    def query_string(self) -> str:
        return urlencode(self.params)

    @property
    def url(self) -> str:
        query = self.query_string
        return f"{self.path}?{query}" if query else self.path
