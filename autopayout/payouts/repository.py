

# autopayout/payouts/repository.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from psycopg2.extras import RealDictCursor


# ==========================================================
# Writes
# ==========================================================

def insert_payout_history(
    conn,
    *,
    recipient_email: str,
    amount: Decimal,
    status: str,
    transaction_id: Optional[str] = None,
    error_message: Optional[str] = None,
    created_at: datetime,
) -> None:
    with conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO payout_history (recipient_email, amount, status, transaction_id, error_message, created_at)
            VALUES (%s, %s, %s, %s, %s, %s);
            """,
            (
                recipient_email,
                amount,
                status,
                transaction_id,
                error_message,
                created_at,
            ),
        )


# ==========================================================
# Reads
# ==========================================================

def recent_payout_history(conn, *, limit: int = 20) -> list[dict[str, Any]]:
    with conn.cursor(cursor_factory=RealDictCursor) as cur:
        cur.execute(
            """
            SELECT id, recipient_email, amount, status, transaction_id, error_message, created_at
            FROM payout_history
            ORDER BY created_at DESC
            LIMIT %s
            """,
            (limit,),
        )
        return [dict(row) for row in cur.fetchall()]
