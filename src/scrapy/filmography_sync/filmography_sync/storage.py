# filmography_sync/storage.py
import logging

import psycopg2
from psycopg2 import sql

from .exceptions import FatalSetupFailure, PersistenceFailure
from .items import WorkItem

logger = logging.getLogger(__name__)

OUTPUT_COLUMNS = (
    'title',
    'title_url',
    'start_year',
    'end_year',
    'episode_count',
    'credit_type',
    'role',
    'production_stage',
)


class CreditStore:
    """The single database connection shared by one sync run."""

    def __init__(self, db_config, tables):
        self.db_config = db_config
        self.tables = tables
        self.conn = None

    @classmethod
    def from_config(cls, config):
        return cls(config.database, config.tables)

    # ----------------------------------------------------------------
    # Connection lifecycle
    # ----------------------------------------------------------------

    def open(self):
        try:
            self.conn = psycopg2.connect(**self.db_config.connect_kwargs())
        except psycopg2.Error as e:
            raise FatalSetupFailure(f"Database connection failed: {e}") from e
        # insert_credit commits each row on its own
        self.conn.autocommit = False
        logger.info("Database connection established successfully.")
        return self

    def close(self):
        if self.conn is not None:
            self.conn.close()
            self.conn = None
            logger.info("Database connection closed.")

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # ----------------------------------------------------------------
    # Queries
    # ----------------------------------------------------------------

    def pending_work_items(self):
        """Entities in the source table that have no output row yet."""
        t = self.tables
        query = sql.SQL(
            "SELECT s.{src_id}, s.{src_url} FROM {source} s "
            "WHERE s.{src_id} NOT IN (SELECT DISTINCT o.{out_id} FROM {output} o)"
        ).format(
            src_id=sql.Identifier(t.source_id_column),
            src_url=sql.Identifier(t.source_url_column),
            source=sql.Identifier(t.source_table),
            out_id=sql.Identifier(t.output_id_column),
            output=sql.Identifier(t.output_table),
        )
        try:
            with self.conn.cursor() as cursor:
                cursor.execute(query)
                rows = cursor.fetchall()
            self.conn.commit()
        except psycopg2.Error as e:
            self.conn.rollback()
            raise FatalSetupFailure(f"Could not load pending entities: {e}") from e

        return [WorkItem(entity_id=row[0], source_url=row[1]) for row in rows]

    def insert_credit(self, item):
        """Insert and commit one credit row."""
        t = self.tables
        columns = (t.output_id_column,) + OUTPUT_COLUMNS
        query = sql.SQL("INSERT INTO {output} ({columns}) VALUES ({values})").format(
            output=sql.Identifier(t.output_table),
            columns=sql.SQL(', ').join(map(sql.Identifier, columns)),
            values=sql.SQL(', ').join(sql.Placeholder() * len(columns)),
        )
        params = (item['entity_id'],) + tuple(item.get(column) for column in OUTPUT_COLUMNS)
        try:
            with self.conn.cursor() as cursor:
                cursor.execute(query, params)
            self.conn.commit()
        except psycopg2.Error as e:
            self.conn.rollback()
            message = e.pgerror.strip() if e.pgerror else str(e)
            raise PersistenceFailure(item['entity_id'], message) from e
