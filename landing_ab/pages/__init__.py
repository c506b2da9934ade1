"""Abstract interface and implementations for looking up site pages.

The redirect engine never stores URLs: it asks a ``PageDirectory`` which page
a request path belongs to and what the permanent path of a target page is.
Two implementations exist: an in-memory directory for embedding and tests,
and :class:`~landing_ab.pages.sql_directory.SqlPageDirectory` backed by the
settings database.  The home page always has id ``0`` and path ``/``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from landing_ab.campaign import HOME_PAGE_ID

HOME_PATH = "/"


@dataclass(frozen=True)
class Page:
    page_id: int
    title: str
    path: str
    status: str = "publish"

    @property
    def is_published(self) -> bool:
        return self.status == "publish"


def normalize_path(path: str) -> str:
    """Return ``path`` with a leading slash and without a trailing one."""
    return "/" + path.strip().strip("/")


class PageDirectory(ABC):
    """Abstract base class for page lookups.

    Implementations must provide ``get_page``, ``find_by_path`` and
    ``published_pages``; the remaining helpers are derived from them.
    """

    @abstractmethod
    def get_page(self, page_id: int) -> Optional[Page]:
        raise NotImplementedError

    @abstractmethod
    def find_by_path(self, path: str) -> Optional[Page]:
        raise NotImplementedError

    @abstractmethod
    def published_pages(self) -> List[Page]:
        raise NotImplementedError

    def page_id_for_path(self, path: str) -> Optional[int]:
        """Return the id of the published page served at ``path``.

        Args:
            path: Request path, with or without trailing slash.

        Returns:
            ``0`` for the home page, the page id for a published page, or
            ``None`` when nothing is published at ``path``.
        """
        path = normalize_path(path)
        if path == HOME_PATH:
            return HOME_PAGE_ID
        page = self.find_by_path(path)
        if page is None or not page.is_published:
            return None
        return page.page_id

    def permalink(self, page_id: int) -> Optional[str]:
        """Return the path of ``page_id`` or None if it is not published."""
        if page_id == HOME_PAGE_ID:
            return HOME_PATH
        page = self.get_page(page_id)
        if page is None or not page.is_published:
            return None
        return page.path

    def is_published(self, page_id: int) -> bool:
        page = self.get_page(page_id)
        return page is not None and page.is_published

    def label_for_page(self, page_id: int) -> str:
        """Human readable label used by the admin endpoints."""
        if page_id < 0:
            return "-"
        if page_id == HOME_PAGE_ID:
            return f"Home Page ({HOME_PATH})"
        page = self.get_page(page_id)
        if page is None or not page.title:
            return "-"
        return f"{page.title} ({page.path})"


class StaticPageDirectory(PageDirectory):
    """In-memory directory built from a fixed list of pages."""

    def __init__(self, pages: Iterable[Page] = ()) -> None:
        self._by_id: Dict[int, Page] = {}
        self._by_path: Dict[str, Page] = {}
        for page in pages:
            self.add(page)

    def add(self, page: Page) -> None:
        page = Page(page.page_id, page.title, normalize_path(page.path), page.status)
        # same replacement rule as SqlPageDirectory.upsert: one row per id and per path
        old = self._by_id.pop(page.page_id, None)
        if old is not None:
            self._by_path.pop(old.path, None)
        taken = self._by_path.pop(page.path, None)
        if taken is not None:
            self._by_id.pop(taken.page_id, None)
        self._by_id[page.page_id] = page
        self._by_path[page.path] = page

    def get_page(self, page_id: int) -> Optional[Page]:
        return self._by_id.get(page_id)

    def find_by_path(self, path: str) -> Optional[Page]:
        return self._by_path.get(normalize_path(path))

    def published_pages(self) -> List[Page]:
        pages = [p for p in self._by_id.values() if p.is_published]
        return sorted(pages, key=lambda p: p.title)


__all__ = [
    "Page",
    "PageDirectory",
    "StaticPageDirectory",
    "HOME_PATH",
    "normalize_path",
]
