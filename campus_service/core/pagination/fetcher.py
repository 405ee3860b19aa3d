"""Keyset page fetcher.

Implements the seek method instead of OFFSET:

    ORDER BY last_update_time DESC, id DESC
    WHERE (last_update_time < :t) OR (last_update_time = :t AND id < :id)

The identifier is always the last sort key, in the same direction as the
primary key, so the ordering is total and pages are disjoint. Pages are
consistent with the database at the time of each request; rows inserted
between two requests may be skipped or seen at the boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import InterfaceError, OperationalError

from campus_service.core.exceptions import StaleCursorException, StoreUnavailableException
from campus_service.core.pagination.cursor import CursorCodec, CursorPosition
from campus_service.core.pagination.schemas import PageParams, PageResult
from campus_service.core.settings import get_pagination_settings
from campus_service.infra.logging import get_lazy_logger
from campus_service.infra.metrics.tracking import track_page, track_stale_cursor

if TYPE_CHECKING:
    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import InstrumentedAttribute

    from campus_service.core.settings import PaginationSettings

_lazy = get_lazy_logger(__name__)


@dataclass(frozen=True, slots=True)
class PageOrder:
    """Sort specification of a listing.

    Attributes:
        id_column: Identifier column (tie-breaker).
        sort_column: Timestamp column, or None to order by identifier only.
        direction: "asc" or "desc", applied to both columns.
    """

    id_column: InstrumentedAttribute[Any]
    sort_column: InstrumentedAttribute[Any] | None = None
    direction: Literal["asc", "desc"] = "desc"

    @property
    def codec(self) -> CursorCodec:
        return CursorCodec(
            sort_field=self.sort_column.key if self.sort_column is not None else None,
            id_field=self.id_column.key,
        )

    def columns(self) -> list[InstrumentedAttribute[Any]]:
        if self.sort_column is None:
            return [self.id_column]
        return [self.sort_column, self.id_column]


class PageFetcher:
    """Fetch one page of a base query with "start after" semantics.

    Usage:
        fetcher = PageFetcher()
        stmt = select(Tag).where(Tag.archived.is_(False))
        order = PageOrder(Tag.id, Tag.last_update_time, "desc")
        page = await fetcher.fetch(session, stmt, order, PageParams(pageSize=5))
        next_page = await fetcher.fetch(session, stmt, order, PageParams(cursor=page.cursor))
    """

    def __init__(self, settings: PaginationSettings | None = None) -> None:
        self.settings = settings or get_pagination_settings()

    def page_size(self, requested: int | None) -> int:
        """Default when absent, silently clamped to the configured maximum."""
        if requested is None:
            return self.settings.default_page_size
        return max(1, min(requested, self.settings.max_page_size))

    async def fetch(
        self,
        session: AsyncSession,
        statement: Select[Any],
        order: PageOrder,
        params: PageParams,
        *,
        listing: str = "default",
    ) -> PageResult[Any]:
        """Fetch the page following ``params.cursor``.

        Args:
            session: Database session.
            statement: Filtered base query without ORDER BY or LIMIT.
            order: Ordering shared by every page of the listing.
            params: Page size and cursor from the client.
            listing: Label used in logs and metrics.

        Returns:
            PageResult with up to ``page_size`` entities and the next cursor.

        Raises:
            StaleCursorException: Identifier cursor whose entity is gone and
                the stale cursor policy is ``error``.
            StoreUnavailableException: The database query failed.
        """
        limit = self.page_size(params.page_size)
        position = CursorCodec.decode(params.cursor)

        try:
            seek_values = None
            if position is not None:
                seek_values = await self._seek_values(session, order, position, params.cursor, listing)

            stmt = self._apply_ordering(statement, order)
            if seek_values is not None:
                stmt = stmt.where(self._seek_condition(order, seek_values))
            result = await session.execute(stmt.limit(limit))
            rows = list(result.scalars().all())
        except (OperationalError, InterfaceError) as e:
            raise StoreUnavailableException() from e

        cursor = order.codec.encode(rows[-1]) if rows else ""
        track_page(listing, not rows)
        _lazy.debug(
            lambda: f"page fetched: listing={listing} size={limit} rows={len(rows)} "
            f"after={params.cursor!r} next={cursor!r}"
        )
        return PageResult(items=rows, cursor=cursor)

    async def _seek_values(
        self,
        session: AsyncSession,
        order: PageOrder,
        position: CursorPosition,
        raw_cursor: str,
        listing: str,
    ) -> list[Any] | None:
        """Sort-key values of the anchor entity, or None to restart from the top."""
        if order.sort_column is None:
            return [position.entity_id]
        if position.sort_millis is not None:
            return [position.sort_value, position.entity_id]

        # Identifier-only cursor on a timestamp ordering: look up the anchor
        anchor_value = (
            await session.execute(
                select(order.sort_column).where(order.id_column == position.entity_id)
            )
        ).scalar_one_or_none()
        if anchor_value is not None:
            return [anchor_value, position.entity_id]

        policy = self.settings.stale_cursor_policy
        track_stale_cursor(listing, policy)
        _lazy.info(
            "Cursor anchor no longer exists",
            extra={"listing": listing, "cursor": raw_cursor, "policy": policy},
        )
        if policy == "error":
            raise StaleCursorException(raw_cursor)
        return None

    @staticmethod
    def _apply_ordering(statement: Select[Any], order: PageOrder) -> Select[Any]:
        for column in order.columns():
            statement = statement.order_by(column.desc() if order.direction == "desc" else column.asc())
        return statement

    @staticmethod
    def _seek_condition(order: PageOrder, values: list[Any]) -> Any:
        """Compound keyset condition.

        For columns (a, b) with values (v1, v2), descending:
            (a < v1) OR (a = v1 AND b < v2)
        """
        columns = order.columns()
        or_conditions = []
        for i, column in enumerate(columns):
            eq_conditions = [columns[j] == values[j] for j in range(i)]
            if order.direction == "desc":
                compare_cond = column < values[i]
            else:
                compare_cond = column > values[i]
            if eq_conditions:
                or_conditions.append(and_(*eq_conditions, compare_cond))
            else:
                or_conditions.append(compare_cond)
        return or_(*or_conditions)


__all__ = ["PageFetcher", "PageOrder"]
