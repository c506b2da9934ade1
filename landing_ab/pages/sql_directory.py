"""Page directory backed by the ``pages`` table of the settings database."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from landing_ab.pages import Page, PageDirectory, normalize_path


class SqlPageDirectory(PageDirectory):
    """SQLAlchemy implementation of the ``PageDirectory`` interface."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def get_page(self, page_id: int) -> Optional[Page]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text("SELECT page_id, title, path, status FROM pages WHERE page_id = :pid"),
                {"pid": page_id},
            ).fetchone()
        return Page(*row) if row else None

    def find_by_path(self, path: str) -> Optional[Page]:
        with self._engine.connect() as conn:
            row = conn.execute(
                text("SELECT page_id, title, path, status FROM pages WHERE path = :path"),
                {"path": normalize_path(path)},
            ).fetchone()
        return Page(*row) if row else None

    def published_pages(self) -> List[Page]:
        with self._engine.connect() as conn:
            rows = conn.execute(
                text(
                    "SELECT page_id, title, path, status FROM pages "
                    "WHERE status = 'publish' ORDER BY title ASC"
                )
            ).fetchall()
        return [Page(*row) for row in rows]

    def upsert(self, page: Page) -> None:
        """Insert or replace a page row."""
        with self._engine.begin() as conn:
            conn.execute(
                text("DELETE FROM pages WHERE page_id = :pid OR path = :path"),
                {"pid": page.page_id, "path": normalize_path(page.path)},
            )
            conn.execute(
                text(
                    "INSERT INTO pages (page_id, title, path, status) "
                    "VALUES (:pid, :title, :path, :status)"
                ),
                {
                    "pid": page.page_id,
                    "title": page.title,
                    "path": normalize_path(page.path),
                    "status": page.status,
                },
            )


__all__ = ["SqlPageDirectory"]
