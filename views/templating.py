"""
Jinja2 environment shared by the pages and the search view
"""

import os

from fastapi.templating import Jinja2Templates

from utils.dates import format_long, format_short
from views.pagination import page_window, showing_range

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")

templates = Jinja2Templates(directory=TEMPLATES_DIR)
templates.env.filters["long_date"] = format_long
templates.env.filters["short_date"] = format_short
templates.env.globals["page_window"] = page_window
templates.env.globals["showing_range"] = showing_range


def render_fragment(name: str, **context) -> str:
    return templates.get_template(name).render(**context)
