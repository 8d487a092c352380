"""
Admin Dashboard state

Holds what an admin view needs: the current page of registrations, the
search text and service filter, pagination meta, and the last error.
Explicit fetches replace the list; live newRegistration pushes are
merged in with `reconcile.merge`.
"""

from collections import Counter
from typing import Any, Dict, List, Optional, Set

from client.api import ApiError, RegistrationApi
from client.reconcile import matches_view, merge, normalize_record

ALL_SERVICES = "All"


class AdminDashboard:
    """
    Usage:
        dashboard = AdminDashboard(api)
        await dashboard.fetch()
        dashboard.apply_live_event({"event": "newRegistration", "data": {...}})
    """

    def __init__(self, api: RegistrationApi, page_size: Optional[int] = None):
        self.api = api
        self.page_size = page_size or api.config.page_size

        self.records: List[Dict[str, Any]] = []
        self.page = 1
        self.search = ""
        self.service_filter = ALL_SERVICES

        self.total = 0
        self.total_pages = 1
        self.has_next_page = False
        self.has_previous_page = False

        self.error: Optional[str] = None
        self.loading = False

        # service -> courses seen across every fetch and push
        self._seen: Dict[str, Set[str]] = {}

    # ==================== FETCHING ====================

    async def fetch(self, page: Optional[int] = None) -> bool:
        """Replace the list with one page from the server. False on error (kept in `error`)."""
        target = max(1, page if page is not None else self.page)
        self.loading = True
        try:
            body = await self.api.list_registrations(
                page=target,
                page_size=self.page_size,
                search=self.search or None,
                service=self.service_filter,
            )
        except ApiError as e:
            self.error = e.message
            return False
        finally:
            self.loading = False

        records = []
        for raw in body.get("data") or []:
            record = normalize_record(raw)
            if record is not None:
                records.append(record)
                self._remember(record)

        self.records = records
        self.page = body.get("page", target)
        self.total = body.get("total", len(records))
        self.total_pages = body.get("totalPages", 1)
        self.has_next_page = body.get("hasNextPage", False)
        self.has_previous_page = body.get("hasPreviousPage", False)
        self.error = None
        return True

    async def refresh(self) -> bool:
        return await self.fetch(self.page)

    async def retry(self) -> bool:
        """Repeat the last fetch (same page, search and filter)"""
        return await self.fetch(self.page)

    async def set_search(self, term: str) -> bool:
        self.search = term.strip()
        return await self.fetch(1)

    async def set_service_filter(self, service: Optional[str]) -> bool:
        self.service_filter = service or ALL_SERVICES
        return await self.fetch(1)

    async def next_page(self) -> bool:
        if not self.has_next_page:
            return False
        return await self.fetch(self.page + 1)

    async def previous_page(self) -> bool:
        if not self.has_previous_page:
            return False
        return await self.fetch(self.page - 1)

    # ==================== MUTATIONS ====================

    async def delete(self, registration_id: str) -> bool:
        try:
            await self.api.delete_registration(registration_id)
        except ApiError as e:
            self.error = e.message
            return False

        before = len(self.records)
        self.records = [r for r in self.records if r.get("id") != registration_id]
        if len(self.records) < before:
            self.total = max(0, self.total - 1)
            self._recompute_pages()
        self.error = None
        return True

    def apply_live_event(self, message: Dict[str, Any]) -> bool:
        """
        Merge a realtime push. Returns True when the visible list changed.

        New records only appear on the first page, and only when they
        match the active search and service filter.
        """
        if not isinstance(message, dict) or message.get("event") != "newRegistration":
            return False
        record = normalize_record(message.get("data"))
        if record is None:
            return False
        self._remember(record)

        if not matches_view(record, self.search, self.service_filter):
            return False

        known = any(r.get("id") == record["id"] for r in self.records)
        if not known and self.page != 1:
            self.total += 1
            self._recompute_pages()
            return False

        merged = merge(self.records, record)
        if len(merged) > len(self.records):
            self.total += 1
        # The oldest row on a full page moves to the next page
        self.records = merged[:self.page_size]
        self._recompute_pages()
        return True

    def _recompute_pages(self) -> None:
        self.total_pages = max(1, -(-self.total // self.page_size))
        self.has_next_page = self.page < self.total_pages
        self.has_previous_page = self.page > 1

    # ==================== DERIVED VIEWS ====================

    def _remember(self, record: Dict[str, Any]) -> None:
        self._seen.setdefault(record["service"], set()).add(record["course"])

    @property
    def services(self) -> List[str]:
        return [ALL_SERVICES] + sorted(self._seen)

    @property
    def course_map(self) -> Dict[str, List[str]]:
        return {service: sorted(courses) for service, courses in sorted(self._seen.items())}

    def service_counts(self) -> Dict[str, int]:
        """Per-service counts over the records currently held"""
        return dict(Counter(record["service"] for record in self.records))
