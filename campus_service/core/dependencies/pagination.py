"""Cursor pagination dependency for list routes.

Usage:
    @router.get("/tags")
    async def list_tags(params: PageParamsDep) -> Page[TagRead]:
        ...

``pageSize`` above ``PAGINATION_MAX_PAGE_SIZE`` is accepted and clamped by
the page fetcher rather than rejected here.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Query

from campus_service.core.pagination import PageParams


def get_page_params(
    page_size: Annotated[
        int | None,
        Query(alias="pageSize", ge=1, description="Items per page (clamped to the maximum)"),
    ] = None,
    cursor: Annotated[
        str,
        Query(description="Cursor returned by the previous page; empty for the first page"),
    ] = "",
) -> PageParams:
    return PageParams(page_size=page_size, cursor=cursor)


PageParamsDep = Annotated[PageParams, Depends(get_page_params)]
