"""
Page-number window for the pagination control
"""

from typing import List, Optional

# Up to this many pages every button is shown
FULL_WINDOW = 5


def page_window(page: int, total_pages: int) -> List[Optional[int]]:
    """
    Page numbers to render, with None marking a collapsed gap (ellipsis).

    >>> page_window(6, 12)
    [1, None, 5, 6, 7, None, 12]
    """
    if total_pages <= 1:
        return []
    if total_pages <= FULL_WINDOW:
        return list(range(1, total_pages + 1))

    shown = {1, total_pages, page - 1, page, page + 1}
    pages = sorted(p for p in shown if 1 <= p <= total_pages)

    window: List[Optional[int]] = []
    for p in pages:
        if window and p - window[-1] > 1:
            window.append(None)
        window.append(p)
    return window


def showing_range(page: int, limit: int, total: int):
    """First and last 1-based item numbers on the page"""
    if total == 0:
        return 0, 0
    return (page - 1) * limit + 1, min(page * limit, total)
