"""
Record Query Engine.

Filtered, ordered, paginated views over live collections. The collection is
copied before anything else touches it; if the copy (or the traversal of
nested live data during filtering) races with a simulation mutation the
result is an empty page tagged with a QueryError instead of an exception.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Generic, Iterable, TypeVar

from .models import (
    Account,
    ItemInfo,
    ItemType,
    MagicInfo,
    MagicSchool,
    MapInfo,
    MirClass,
    MonsterInfo,
)

if TYPE_CHECKING:
    from .context import AdminContext

logger = logging.getLogger(__name__)

T = TypeVar("T")


class QueryError(Enum):
    COLLECTION_CHANGED = "collection_changed"
    TRAVERSAL_FAILED = "traversal_failed"


@dataclass
class Page(Generic[T]):
    items: list[T] = field(default_factory=list)
    total_count: int = 0
    page: int = 1
    page_size: int = 1

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.page_size)

    def to_dict(self, render: Callable[[T], Any] = lambda x: x) -> dict[str, Any]:
        return {
            "items": [render(item) for item in self.items],
            "total_count": self.total_count,
            "page": self.page,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
        }


@dataclass
class QueryResult(Generic[T]):
    page: Page[T]
    error: QueryError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def normalize_page(page: int | None) -> int:
    if page is None or page < 1:
        return 1
    return page


def keyword_matches(
    keyword: str, texts: Iterable[str | None], index: int | None = None
) -> bool:
    """Case-insensitive substring over texts, or plain substring of the index."""
    needle = keyword.casefold()
    for text in texts:
        if text and needle in text.casefold():
            return True
    return index is not None and keyword in str(index)


def paginate(
    records: Iterable[T],
    *,
    page: int | None,
    page_size: int,
    order_key: Callable[[T], Any],
    keyword: str | None = None,
    text_fields: Callable[[T], Iterable[str | None]] = lambda r: (),
    match_index: bool = False,
    filters: Iterable[Callable[[T], bool]] = (),
) -> QueryResult[T]:
    """
    Snapshot, filter, sort and slice a collection.

    An empty or whitespace keyword means no keyword filter. Structured
    filters are AND-ed with the keyword predicate.
    """
    page = normalize_page(page)
    keyword = (keyword or "").strip()
    predicates = list(filters)

    def wanted(record: T) -> bool:
        if not all(predicate(record) for predicate in predicates):
            return False
        if not keyword:
            return True
        index = getattr(record, "index", None) if match_index else None
        return keyword_matches(keyword, text_fields(record), index)

    try:
        snapshot = list(records)
        matched = sorted((r for r in snapshot if wanted(r)), key=order_key)
    except RuntimeError as e:
        logger.warning(f"Query raced with a collection change: {e}")
        return QueryResult(Page(page=page, page_size=page_size), QueryError.COLLECTION_CHANGED)
    except Exception as e:
        logger.error(f"Query traversal failed: {e}", exc_info=True)
        return QueryResult(Page(page=page, page_size=page_size), QueryError.TRAVERSAL_FAILED)

    start = (page - 1) * page_size
    return QueryResult(
        Page(
            items=matched[start : start + page_size],
            total_count=len(matched),
            page=page,
            page_size=page_size,
        )
    )


# ============================================================================
# Call-sites
# ============================================================================


def _character_names(account: Account) -> list[str]:
    return [c.name for c in list(account.characters)]


def query_accounts(
    ctx: "AdminContext", keyword: str | None = None, page: int | None = 1
) -> QueryResult[Account]:
    return paginate(
        ctx.records.accounts.snapshot(),
        page=page,
        page_size=ctx.config.account_page_size,
        keyword=keyword,
        text_fields=lambda a: [a.email, *_character_names(a)],
        order_key=lambda a: a.index,
    )


def query_items(
    ctx: "AdminContext",
    keyword: str | None = None,
    item_type: ItemType | None = None,
    page: int | None = 1,
) -> QueryResult[ItemInfo]:
    filters = []
    if item_type is not None:
        filters.append(lambda i: i.item_type == item_type)
    return paginate(
        ctx.records.items.snapshot(),
        page=page,
        page_size=ctx.config.catalog_page_size,
        keyword=keyword,
        text_fields=lambda i: [i.name],
        match_index=True,
        filters=filters,
        order_key=lambda i: (i.item_type, i.required_amount, i.index),
    )


def query_monsters(
    ctx: "AdminContext", keyword: str | None = None, page: int | None = 1
) -> QueryResult[MonsterInfo]:
    return paginate(
        ctx.records.monsters.snapshot(),
        page=page,
        page_size=ctx.config.catalog_page_size,
        keyword=keyword,
        text_fields=lambda m: [m.name],
        match_index=True,
        order_key=lambda m: (m.level, m.index),
    )


def query_magics(
    ctx: "AdminContext",
    keyword: str | None = None,
    mir_class: MirClass | None = None,
    school: MagicSchool | None = None,
    page: int | None = 1,
) -> QueryResult[MagicInfo]:
    filters = []
    if mir_class is not None:
        filters.append(lambda m: m.mir_class == mir_class)
    if school is not None:
        filters.append(lambda m: m.school == school)
    return paginate(
        ctx.records.magics.snapshot(),
        page=page,
        page_size=ctx.config.catalog_page_size,
        keyword=keyword,
        text_fields=lambda m: [m.name, m.magic.name, m.magic.name.replace("_", "")],
        match_index=True,
        filters=filters,
        order_key=lambda m: (m.mir_class, m.school, m.need_level1, m.index),
    )


def map_player_count(ctx: "AdminContext", info: MapInfo) -> int:
    live_map = ctx.world.get_map(info.index)
    return len(live_map.players) if live_map is not None else 0


def query_maps(
    ctx: "AdminContext", keyword: str | None = None, page: int | None = 1
) -> QueryResult[MapInfo]:
    counts: dict[int, int] = {}

    def order(info: MapInfo):
        if info.index not in counts:
            counts[info.index] = map_player_count(ctx, info)
        return (-counts[info.index], info.description, info.index)

    return paginate(
        ctx.records.maps.snapshot(),
        page=page,
        page_size=ctx.config.catalog_page_size,
        keyword=keyword,
        text_fields=lambda m: [m.description, m.file_name],
        order_key=order,
    )


def query_players(
    ctx: "AdminContext", keyword: str | None = None, page: int | None = 1
) -> QueryResult[Any]:
    return paginate(
        ctx.world.connected_players(),
        page=page,
        page_size=ctx.config.catalog_page_size,
        keyword=keyword,
        text_fields=lambda p: [p.name],
        order_key=lambda p: p.name.casefold(),
    )
