"""Query specifications describing one page request against a collection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from admin_console.config.settings import get_settings
from admin_console.domain.models import ResourceKind

ALL = "all"

# Filterable field -> query parameter name understood by the remote API.
FILTERABLE_FIELDS: dict[ResourceKind, dict[str, str]] = {
    ResourceKind.DEVICE: {
        "status": "status",
        "type": "deviceType",
        "category": "category",
        "condition": "condition",
    },
    ResourceKind.REQUEST: {
        "status": "status",
        "search": "search",
    },
    ResourceKind.USER: {
        "role": "role",
        "status": "status",
        "organization": "organization",
    },
    ResourceKind.TEAM_MEMBER: {
        "role": "role",
        "status": "status",
    },
}


@dataclass(slots=True, frozen=True)
class QuerySpec:
    """Immutable description of a page request.

    ``filters`` is kept as a sorted tuple of pairs so two specs built from the
    same choices compare equal regardless of dict ordering.
    """

    kind: ResourceKind
    page: int
    page_size: int
    filters: tuple[tuple[str, str], ...] = ()
    search: Optional[str] = None

    @property
    def filter_map(self) -> dict[str, str]:
        return dict(self.filters)

    def with_page(self, page: int) -> "QuerySpec":
        return build_query(self.kind, page, self.filter_map, self.search, page_size=self.page_size)

    def to_params(self) -> dict[str, str]:
        """Render the spec as remote query parameters."""

        names = FILTERABLE_FIELDS[self.kind]
        params = {"page": str(self.page), "limit": str(self.page_size)}
        for key, value in self.filters:
            params[names[key]] = value
        if self.search:
            params["search"] = self.search
        return params


def _clean(value: object) -> str:
    return str(value).strip() if value is not None else ""


def build_query(
    kind: ResourceKind,
    page: int = 1,
    filters: Optional[Mapping[str, object]] = None,
    search: Optional[str] = None,
    *,
    page_size: Optional[int] = None,
) -> QuerySpec:
    """Build a valid :class:`QuerySpec` from raw screen state.

    Never raises: pages below 1 are clamped, ``"all"``/blank filter values and
    keys the kind does not declare are dropped.
    """

    settings = get_settings()
    size = page_size if page_size is not None else settings.default_page_size
    size = max(1, min(size, settings.max_page_size))

    allowed = FILTERABLE_FIELDS[kind]
    cleaned: dict[str, str] = {}
    for key, raw in (filters or {}).items():
        value = _clean(raw)
        if key not in allowed or not value or value.lower() == ALL:
            continue
        cleaned[key] = value

    term = _clean(search)
    # Request screens pass the search box through the filter map.
    if "search" in cleaned:
        filter_term = cleaned.pop("search")
        term = term or filter_term

    return QuerySpec(
        kind=kind,
        page=max(1, int(page)),
        page_size=size,
        filters=tuple(sorted(cleaned.items())),
        search=term or None,
    )


def default_query(kind: ResourceKind) -> QuerySpec:
    """First page with no filters, as shown when a screen opens."""

    return build_query(kind)


def page_window(current: int, total_pages: int, width: int = 5) -> list[int]:
    """Page numbers for the pagination bar, centred on ``current`` where possible."""

    if total_pages < 1:
        return []
    count = min(width, total_pages)
    start = max(1, min(total_pages - width + 1, current - width // 2))
    return list(range(start, start + count))
