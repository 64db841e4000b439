"""Construction de la requête de liste des tâches à partir des query params.

Les paramètres arrivent bruts (chaînes non fiables). Le résultat est une
`FilterSpec` validée : filtre (aucun / statut / recherche / les deux), tri
sur un champ autorisé, et pagination. Aucune valeur reçue n'est transmise
telle quelle comme nom de colonne.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple, Union

from tasktracker.core.errors import InvalidArgument
from tasktracker.schemas.common import MAX_DB_INT, MIN_DB_INT
from tasktracker.util.time import to_naive_utc

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


class SortField(str, Enum):
    DUE_DATE = "dueDate"
    CREATED_AT = "createdAt"
    STATUS = "status"
    USER_ID = "userId"
    RECURRING = "recurring"
    PRIORITY = "priority"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


# Champs texte couverts par la recherche (ILIKE)
TEXT_SEARCH_FIELDS = ("title", "description", "recurring", "priority")


@dataclass(frozen=True)
class TextContains:
    field: str
    needle: str


@dataclass(frozen=True)
class UserIdEquals:
    user_id: int


@dataclass(frozen=True)
class InstantEquals:
    """dueDate OU createdAt égal à l'instant"""
    instant: datetime


SearchClause = Union[TextContains, UserIdEquals, InstantEquals]


@dataclass(frozen=True)
class NoFilter:
    pass


@dataclass(frozen=True)
class StatusFilter:
    status: str


@dataclass(frozen=True)
class SearchFilter:
    clauses: Tuple[SearchClause, ...]


@dataclass(frozen=True)
class CombinedFilter:
    """statut ET (OU des clauses de recherche)"""
    status: str
    clauses: Tuple[SearchClause, ...]


TaskFilter = Union[NoFilter, StatusFilter, SearchFilter, CombinedFilter]


@dataclass(frozen=True)
class FilterSpec:
    filter: TaskFilter
    sort_field: SortField
    sort_order: SortOrder
    page_index: int
    page_size: int

    @property
    def page(self) -> int:
        return self.page_index + 1

    @property
    def skip(self) -> int:
        return self.page_index * self.page_size


def _blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


def parse_sort_field(sort_by: Optional[str]) -> SortField:
    # Champ inconnu ou absent -> createdAt
    if sort_by is None:
        return SortField.CREATED_AT
    try:
        return SortField(sort_by)
    except ValueError:
        return SortField.CREATED_AT


def parse_sort_order(order: Optional[str]) -> SortOrder:
    if _blank(order):
        return SortOrder.ASC
    try:
        return SortOrder(order.strip().lower())
    except ValueError:
        raise InvalidArgument(f"Invalid sort order '{order}', expected 'asc' or 'desc'")


def _parse_int(name: str, value: Optional[str], default: int) -> int:
    if _blank(value):
        return default
    try:
        number = int(value)
    except ValueError:
        raise InvalidArgument(f"Query parameter '{name}' must be an integer")
    if not MIN_DB_INT <= number <= MAX_DB_INT:
        raise InvalidArgument(f"Query parameter '{name}' is out of range")
    return number


def parse_pagination(page: Optional[str], limit: Optional[str]) -> Tuple[int, int]:
    """Retourne (page_index, page_size)"""
    page_number = _parse_int("page", page, DEFAULT_PAGE)
    page_size = _parse_int("limit", limit, DEFAULT_LIMIT)
    if page_size < 1:
        raise InvalidArgument("Query parameter 'limit' must be at least 1")
    page_index = max(page_number, 1) - 1
    # l'offset (page_index * page_size) doit tenir dans un entier 64 bits
    if page_index * page_size > MAX_DB_INT:
        raise InvalidArgument("Query parameters 'page' and 'limit' are out of range")
    return page_index, page_size


def _parse_instant(search: str) -> Optional[datetime]:
    try:
        return to_naive_utc(datetime.fromisoformat(search.strip()))
    except ValueError:
        return None


def build_search_clauses(search: str) -> Tuple[SearchClause, ...]:
    clauses = [TextContains(field, search) for field in TEXT_SEARCH_FIELDS]

    try:
        user_id = int(search)
    except ValueError:
        user_id = None
    if user_id is not None and MIN_DB_INT <= user_id <= MAX_DB_INT:
        clauses.append(UserIdEquals(user_id))

    instant = _parse_instant(search)
    if instant is not None:
        clauses.append(InstantEquals(instant))

    return tuple(clauses)


def build_filter(status: Optional[str], search: Optional[str]) -> TaskFilter:
    has_status = not _blank(status)
    has_search = not _blank(search)

    if has_status and has_search:
        return CombinedFilter(status=status, clauses=build_search_clauses(search))
    if has_status:
        return StatusFilter(status=status)
    if has_search:
        return SearchFilter(clauses=build_search_clauses(search))
    return NoFilter()


def build_filter_spec(
    status: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    order: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
) -> FilterSpec:
    page_index, page_size = parse_pagination(page, limit)
    return FilterSpec(
        filter=build_filter(status, search),
        sort_field=parse_sort_field(sort_by),
        sort_order=parse_sort_order(order),
        page_index=page_index,
        page_size=page_size,
    )
