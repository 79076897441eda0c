"""payout history

Revision ID: 0001_payout_history
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from __future__ import annotations

from pathlib import Path

from alembic import op


revision = "0001_payout_history"
down_revision = None
branch_labels = None
depends_on = None


def _load_schema_sql() -> str:
    schema_path = Path(__file__).resolve().parents[1] / "sql" / "payout_history.sql"
    raw = schema_path.read_text(encoding="utf-8")
    return "\n".join(line for line in raw.splitlines() if line.strip() and not line.strip().startswith("--"))


def upgrade() -> None:
    op.execute(_load_schema_sql())


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS payout_history;")
