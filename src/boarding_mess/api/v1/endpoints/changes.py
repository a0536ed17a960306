"""Change feed polling endpoint."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query

from boarding_mess.api.v1.dependencies import CurrentMemberDep
from boarding_mess.services.change_feed import ChangeFeed, get_change_feed

router = APIRouter(prefix="/changes", tags=["changes"])


def get_change_feed_dep() -> ChangeFeed:
    return get_change_feed()


ChangeFeedDep = Annotated[ChangeFeed, Depends(get_change_feed_dep)]


@router.get("/")
async def poll_changes(
    _member: CurrentMemberDep,
    feed: ChangeFeedDep,
    after: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=1000)] = 500,
) -> dict[str, Any]:
    """Return committed changes with a sequence number greater than ``after``.

    ``truncated`` is true when events between ``after`` and the oldest
    retained one were dropped; clients should then refetch full state.
    """
    changes = feed.since(after, limit=limit)
    oldest = feed.oldest_seq()
    return {
        "changes": [
            {
                "seq": change.seq,
                "table": change.table,
                "action": change.action,
                "id": change.row_id,
                "recorded_at": change.recorded_at.isoformat(),
            }
            for change in changes
        ],
        "last_seq": feed.last_seq,
        "truncated": oldest is not None and oldest > after + 1,
    }
