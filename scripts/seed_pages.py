"""Register pages in the page directory.

The redirect server only knows the pages listed in the ``pages`` table.
Each argument is ``ID:PATH:TITLE``; an optional fourth field sets the
status (``publish`` by default)::

    python scripts/seed_pages.py "10:/sale:Sale" "11:/sale/v1:Sale A" "12:/sale/v2:Sale B"
"""

from __future__ import annotations

import sys
from typing import List

from landing_ab.config import load_settings
from landing_ab.db import get_engine
from landing_ab.pages import Page
from landing_ab.pages.sql_directory import SqlPageDirectory


def parse_page(arg: str) -> Page:
    parts = arg.split(":", 3)
    if len(parts) < 3:
        raise ValueError(f"expected ID:PATH:TITLE, got {arg!r}")
    page_id = int(parts[0])
    if page_id <= 0:
        raise ValueError("page ids must be positive; 0 is the home page")
    status = parts[3] if len(parts) == 4 else "publish"
    return Page(page_id, parts[2], parts[1], status)


def main(argv: List[str]) -> int:
    directory = SqlPageDirectory(get_engine(load_settings().database_url))
    for arg in argv:
        page = parse_page(arg)
        directory.upsert(page)
        print(f"page {page.page_id}: {page.title} ({page.path}) [{page.status}]")
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation
    sys.exit(main(sys.argv[1:]))
