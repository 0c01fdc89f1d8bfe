"""
Read-only listing commands over the Record Query Engine.

Listings never fail on a traversal race: they return an empty page and
name the error in `data["error"]`.
"""

import logging
from typing import Any, Callable, Optional

from pydantic import Field

from ..models import ItemType, MagicSchool, MirClass
from ..outcome import Outcome
from ..query import (
    Page,
    QueryError,
    QueryResult,
    map_player_count,
    query_accounts,
    query_items,
    query_magics,
    query_maps,
    query_monsters,
    query_players,
)
from ..roles import AccountIdentity
from .base import AdminCommand, CommandParams, admin_command, enum_param
from .views import (
    account_view,
    item_view,
    magic_view,
    map_view,
    monster_view,
    player_view,
)

logger = logging.getLogger(__name__)

ItemTypeFilter = enum_param(ItemType, lenient=True)
MirClassFilter = enum_param(MirClass, lenient=True)
MagicSchoolFilter = enum_param(MagicSchool, lenient=True)


class ListParams(CommandParams):
    keyword: Optional[str] = None
    page: int = Field(1, description="1-based page; values below 1 mean 1")


class ListItemsParams(ListParams):
    item_type: ItemTypeFilter = None


class ListMagicsParams(ListParams):
    mir_class: MirClassFilter = None
    school: MagicSchoolFilter = None


def _listing(label: str, result: QueryResult, render: Callable[[Any], Any]) -> Outcome:
    page = result.page
    try:
        data = page.to_dict(render)
    except Exception as e:
        # Rendering reads live state too
        logger.error(f"{label} listing render failed: {e}", exc_info=True)
        page = Page(page=page.page, page_size=page.page_size)
        result = QueryResult(page, QueryError.TRAVERSAL_FAILED)
        data = page.to_dict(render)
    if result.error is not None:
        data["error"] = result.error.value
        return Outcome.success(f"{label}: listing unavailable, try again", data=data)
    return Outcome.success(
        f"{label}: {page.total_count} match(es), page {page.page}/{max(page.total_pages, 1)}",
        data=data,
    )


@admin_command(
    name="list_accounts",
    required_role=AccountIdentity.NORMAL,
    params=ListParams,
    description="Search accounts by email or character name",
)
class ListAccounts(AdminCommand):
    def execute(self, params: ListParams) -> Outcome:
        result = query_accounts(self.ctx, params.keyword, params.page)
        return _listing("Accounts", result, account_view)


@admin_command(
    name="list_items",
    required_role=AccountIdentity.NORMAL,
    params=ListItemsParams,
    description="Search item definitions",
)
class ListItems(AdminCommand):
    def execute(self, params: ListItemsParams) -> Outcome:
        result = query_items(self.ctx, params.keyword, params.item_type, params.page)
        return _listing("Items", result, item_view)


@admin_command(
    name="list_monsters",
    required_role=AccountIdentity.NORMAL,
    params=ListParams,
    description="Search monster definitions",
)
class ListMonsters(AdminCommand):
    def execute(self, params: ListParams) -> Outcome:
        result = query_monsters(self.ctx, params.keyword, params.page)
        return _listing("Monsters", result, monster_view)


@admin_command(
    name="list_magics",
    required_role=AccountIdentity.NORMAL,
    params=ListMagicsParams,
    description="Search skill definitions",
)
class ListMagics(AdminCommand):
    def execute(self, params: ListMagicsParams) -> Outcome:
        result = query_magics(
            self.ctx, params.keyword, params.mir_class, params.school, params.page
        )
        return _listing("Skills", result, magic_view)


@admin_command(
    name="list_maps",
    required_role=AccountIdentity.NORMAL,
    params=ListParams,
    description="Search map definitions, busiest first",
)
class ListMaps(AdminCommand):
    def execute(self, params: ListParams) -> Outcome:
        result = query_maps(self.ctx, params.keyword, params.page)
        return _listing(
            "Maps", result, lambda info: map_view(info, map_player_count(self.ctx, info))
        )


@admin_command(
    name="list_players",
    required_role=AccountIdentity.NORMAL,
    params=ListParams,
    description="Search connected players",
)
class ListPlayers(AdminCommand):
    def execute(self, params: ListParams) -> Outcome:
        result = query_players(self.ctx, params.keyword, params.page)
        return _listing("Players", result, player_view)
