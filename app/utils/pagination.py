# app/utils/pagination.py

import math
from typing import Any, List, Tuple

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

MAX_PAGE_SIZE = 100


async def paginate(
    db: AsyncSession, stmt: Select, page: int, limit: int
) -> Tuple[List[Any], int]:
    """
    Run ``stmt`` for one page. Returns (items, total) where total counts the
    rows of the unpaginated, filtered statement.
    """
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = (await db.execute(count_stmt)).scalar_one()
    result = await db.execute(stmt.offset((page - 1) * limit).limit(limit))
    return list(result.scalars().all()), total


def page_payload(items: List[Any], total: int, page: int, limit: int) -> dict:
    return {
        "data": items,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if limit else 0,
    }
