import math

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession


async def paginate(db: AsyncSession, query, page: int, per_page: int, options=()) -> dict:
    """
    Offset pagination over an ORM select.

    `query` must carry filters and ordering only; loader `options` are applied
    to the page fetch so the count stays a plain subquery.
    """
    count_q = select(func.count()).select_from(query.order_by(None).subquery())
    total = (await db.execute(count_q)).scalar_one()

    page_q = query.options(*options).limit(per_page).offset((page - 1) * per_page)
    items = (await db.execute(page_q)).scalars().unique().all()

    return {
        "data": items,
        "current_page": page,
        "per_page": per_page,
        "total": total,
        "last_page": max(1, math.ceil(total / per_page)),
    }
