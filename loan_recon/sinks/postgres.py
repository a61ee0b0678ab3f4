"""PostgreSQL sink storing the latest snapshot of each session step."""

import json
import logging
from typing import Any

from loan_recon.config import PostgresConfig
from loan_recon.exceptions import SinkError
from loan_recon.sinks.serialization import serialize_value, to_dict

logger = logging.getLogger(__name__)

CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS reconciliation_snapshots (
    session_id  TEXT NOT NULL,
    step        TEXT NOT NULL,
    payload     JSONB NOT NULL,
    metadata    JSONB NOT NULL DEFAULT '{}'::jsonb,
    created_at  TIMESTAMP NOT NULL,
    PRIMARY KEY (session_id, step)
)
"""

UPSERT_SQL = """
INSERT INTO reconciliation_snapshots (session_id, step, payload, metadata, created_at)
VALUES (%s, %s, %s, %s, %s)
ON CONFLICT (session_id, step) DO UPDATE
SET payload = EXCLUDED.payload,
    metadata = EXCLUDED.metadata,
    created_at = EXCLUDED.created_at
"""

SELECT_SQL = "SELECT payload FROM reconciliation_snapshots WHERE session_id = %s AND step = %s"

CREATE_EXPORTS_SQL = """
CREATE TABLE IF NOT EXISTS reconciliation_exports (
    entity_type TEXT NOT NULL,
    data        JSONB NOT NULL
)
"""


class PostgresSnapshotSink:
    """Upsert session snapshots into ``reconciliation_snapshots``.

    Parameters
    ----------
    config : PostgresConfig | str
        Connection settings or a connection string.
    connection : Any | None
        Open psycopg connection to reuse (mostly for tests).
    """

    def __init__(self, config: PostgresConfig | str, connection: Any | None = None) -> None:
        if isinstance(config, PostgresConfig):
            self.conninfo = config.connection_string
        else:
            self.conninfo = config
        self._conn = connection
        self._schema_ready = False

    def _connection(self) -> Any:
        if self._conn is None:
            import psycopg

            try:
                self._conn = psycopg.connect(self.conninfo)
            except psycopg.Error as exc:
                raise SinkError(f"Cannot connect to PostgreSQL: {exc}") from exc
        if not self._schema_ready:
            with self._conn.cursor() as cur:
                cur.execute(CREATE_TABLE_SQL)
                cur.execute(CREATE_EXPORTS_SQL)
            self._conn.commit()
            self._schema_ready = True
        return self._conn

    def save(self, snapshot: Any) -> bool:
        """Upsert the snapshot for its (session, step)."""
        conn = self._connection()
        try:
            with conn.cursor() as cur:
                cur.execute(
                    UPSERT_SQL,
                    (
                        snapshot.session_id,
                        snapshot.step.value,
                        json.dumps(serialize_value(snapshot.payload), ensure_ascii=False),
                        json.dumps(serialize_value(snapshot.metadata), ensure_ascii=False),
                        snapshot.created_at,
                    ),
                )
            conn.commit()
        except Exception as exc:
            conn.rollback()
            raise SinkError(f"Snapshot upsert failed: {exc}") from exc
        logger.debug("Snapshot %s/%s upserted", snapshot.session_id, snapshot.step.value)
        return True

    def load(self, session_id: str, step: str) -> dict | None:
        """Latest payload of a step, None if never saved."""
        conn = self._connection()
        with conn.cursor() as cur:
            cur.execute(SELECT_SQL, (session_id, step))
            row = cur.fetchone()
        if row is None:
            return None
        payload = row[0]
        return json.loads(payload) if isinstance(payload, str) else payload

    def write_batch(self, entity_type: str, records: list[Any]) -> None:
        """Append an export batch to ``reconciliation_exports``."""
        conn = self._connection()
        with conn.cursor() as cur:
            cur.executemany(
                "INSERT INTO reconciliation_exports (entity_type, data) VALUES (%s, %s)",
                [(entity_type, json.dumps(to_dict(r), ensure_ascii=False)) for r in records],
            )
        conn.commit()
        logger.info("Exported %d %s rows to PostgreSQL", len(records), entity_type)

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
