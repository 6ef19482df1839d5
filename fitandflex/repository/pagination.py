from __future__ import annotations

from typing import Any, List, Mapping, Tuple

from sqlalchemy.orm import Query

from fitandflex.schemas.common import PageParams


def paginate(
    query: Query,
    params: PageParams,
    sortable: Mapping[str, Any],
    default_sort: Any,
) -> Tuple[List[Any], int]:
    """Apply sort, offset and limit to ``query`` and return (items, total).

    Unknown sort fields fall back to ``default_sort`` so a client cannot sort
    on arbitrary columns.
    """
    total = query.order_by(None).count()
    column = sortable.get(params.sort, default_sort)
    ordering = column.desc() if params.descending else column.asc()
    items = query.order_by(ordering).offset(params.offset).limit(params.size).all()
    return items, total


__all__ = ["paginate"]
