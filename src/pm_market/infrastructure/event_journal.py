"""DB helpers for the market_events audit journal.

Market state lives in memory; this table is the append-only audit record
written after every successful operation within the caller's transaction.
"""
import json
import uuid

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.datetime_utils import utc_now
from src.pm_market.domain.events import MarketEvent

_INSERT_EVENT_SQL = text("""
    INSERT INTO market_events (event_id, market_id, event_type, payload, recorded_at)
    VALUES (:event_id, :market_id, :event_type, :payload, :recorded_at)
""")


async def write_market_event(event: MarketEvent, db: AsyncSession) -> str:
    """Insert one row into market_events; returns the generated event_id."""
    event_id = str(uuid.uuid4())
    await db.execute(
        _INSERT_EVENT_SQL,
        {
            "event_id": event_id,
            "market_id": event.market_id,
            "event_type": event.event_type.value,
            "payload": json.dumps(event.to_payload()),
            "recorded_at": utc_now(),
        },
    )
    return event_id


async def write_market_events(batch: list[MarketEvent], db: AsyncSession) -> int:
    for event in batch:
        await write_market_event(event, db)
    return len(batch)
