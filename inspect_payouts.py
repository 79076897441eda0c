# inspect_payouts.py
import psycopg2
import psycopg2.extras

from autopayout.payouts.repository import recent_payout_history
from settings import db_configured, settings

if not db_configured():
    raise SystemExit("DB_HOST/DB_USER/DB_PASSWORD/DB_NAME not set; outcomes are in the fallback log files.")

conn = psycopg2.connect(
    host=settings.DB_HOST,
    port=settings.DB_PORT,
    user=settings.DB_USER,
    password=settings.DB_PASSWORD,
    dbname=settings.DB_NAME,
)
conn.autocommit = True
cur = conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor)

print("\n--- Status counts ---")
cur.execute("""
  select status, count(*) as n, sum(amount) as total
  from payout_history
  group by status
  order by n desc
""")
for r in cur.fetchall():
    print(r)

print("\n--- Latest 10 rows ---")
for r in recent_payout_history(conn, limit=10):
    print(r)

conn.close()
