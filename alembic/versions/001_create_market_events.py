"""001: create market_events table

Revision ID: 001
Revises:
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE market_events (
            event_id        VARCHAR(36)     PRIMARY KEY,
            market_id       VARCHAR(64)     NOT NULL,
            event_type      VARCHAR(30)     NOT NULL,
            payload         JSONB           NOT NULL,
            recorded_at     TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_market_event_type CHECK (
                event_type IN (
                    'MARKET_CREATED',
                    'TOKENS_PURCHASED',
                    'MARKET_SETTLED',
                    'REWARDS_CLAIMED',
                    'FEES_WITHDRAWN'
                )
            )
        );
    """)
    op.execute("CREATE INDEX idx_market_events_market_time ON market_events (market_id, recorded_at);")
    op.execute("CREATE INDEX idx_market_events_type ON market_events (event_type);")
    op.execute("COMMENT ON TABLE market_events IS 'Market operation audit journal, append-only';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS market_events CASCADE;")
