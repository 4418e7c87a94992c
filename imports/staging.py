"""
Staging table helpers - job-owned tables holding raw imported rows.

Provides:
- Staging table creation shaped to a list of column names
- Batched "insert, ignore duplicates" writes with bound parameters
- Tracking columns recording per-row import status
- Drop for the job lifecycle cleanup

Tables are created on the default connection with backend-neutral DDL built
from Django's own column types, so the same code runs on PostgreSQL, MySQL
and SQLite.
"""

import logging
import uuid
from collections.abc import Iterable
from itertools import islice

from django.db import connection, models
from django.db.models.constants import OnConflict

logger = logging.getLogger(__name__)

STAGING_TABLE_PREFIX = "import_tmp_"
ROW_KEY_COLUMN = "_id"
STATUS_MAX_LENGTH = 32
DEFAULT_ROW_STATUS = "NEW"


def generate_table_name() -> str:
    """Return a fresh staging table name; every call gets its own table."""
    return f"{STAGING_TABLE_PREFIX}{uuid.uuid4().hex}"


def _quote(name: str) -> str:
    return connection.ops.quote_name(name)


def _row_key_definition() -> str:
    key = models.AutoField(primary_key=True)
    key_type = key.db_type(connection)
    suffix = key.db_type_suffix(connection) or ""
    return f"{_quote(ROW_KEY_COLUMN)} {key_type} NOT NULL PRIMARY KEY {suffix}".rstrip()


def tracking_column_definitions() -> list[str]:
    """Column definitions appended to every staging table after it is populated."""
    integer_type = models.IntegerField().db_type(connection)
    status_type = models.CharField(max_length=STATUS_MAX_LENGTH).db_type(connection)
    text_type = models.TextField().db_type(connection)
    return [
        f"{_quote('_entity_id')} {integer_type} NULL",
        f"{_quote('_status')} {status_type} NOT NULL DEFAULT '{DEFAULT_ROW_STATUS}'",
        f"{_quote('_status_message')} {text_type} NULL",
    ]


def create_staging_table(columns: list[str]) -> str:
    """
    Create a staging table with one text column per name.

    Args:
        columns: Column names, in file order

    Returns:
        Name of the created table
    """
    table_name = generate_table_name()
    text_type = models.TextField().db_type(connection)
    definitions = [_row_key_definition()]
    definitions += [f"{_quote(column)} {text_type} NULL" for column in columns]

    with connection.cursor() as cursor:
        cursor.execute(f"CREATE TABLE {_quote(table_name)} ({', '.join(definitions)})")

    logger.info(f"[IMPORT] Created staging table {table_name} with {len(columns)} columns")
    return table_name


def insert_rows(table_name: str, columns: list[str], rows: list[list[str]]) -> int:
    """
    Insert rows with a single multi-row statement, ignoring duplicate keys.

    Duplicate-key rows are dropped rather than failing the statement; staging
    tables have no natural key so this only guards the row key.

    Returns:
        Number of rows sent to the database
    """
    if not rows:
        return 0

    ops = connection.ops
    statement = ops.insert_statement(on_conflict=OnConflict.IGNORE)
    suffix = ops.on_conflict_suffix_sql([], OnConflict.IGNORE, None, None)
    column_list = ", ".join(_quote(column) for column in columns)
    placeholders = "(" + ", ".join(["%s"] * len(columns)) + ")"
    values = ", ".join([placeholders] * len(rows))

    sql = f"{statement} {_quote(table_name)} ({column_list}) VALUES {values}"
    if suffix:
        sql = f"{sql} {suffix}"

    params = [value for row in rows for value in row]
    with connection.cursor() as cursor:
        cursor.execute(sql, params)
    return len(rows)


def stage_rows(
    table_name: str,
    columns: list[str],
    rows: Iterable[list[str]],
    rows_per_statement: int,
    limit: int | None = None,
) -> int:
    """
    Stream rows into a staging table.

    Rows are accumulated until ``rows_per_statement`` are pending, then
    written with one statement; the remainder is flushed at the end.

    Args:
        table_name: Target staging table
        columns: Column names matching every row's arity
        rows: Sanitized rows
        rows_per_statement: Rows per INSERT statement
        limit: Stop after this many rows (None for all)

    Returns:
        Number of rows staged
    """
    if limit is not None:
        rows = islice(rows, limit)

    staged = 0
    batch = []
    for row in rows:
        batch.append(row)
        if len(batch) >= rows_per_statement:
            staged += insert_rows(table_name, columns, batch)
            batch = []

    if batch:
        staged += insert_rows(table_name, columns, batch)

    logger.info(f"[IMPORT] Staged {staged} rows into {table_name}")
    return staged


def add_tracking_fields_to_table(table_name: str) -> None:
    """Append the row status tracking columns to a populated staging table."""
    with connection.cursor() as cursor:
        for definition in tracking_column_definitions():
            cursor.execute(f"ALTER TABLE {_quote(table_name)} ADD COLUMN {definition}")


def table_exists(table_name: str) -> bool:
    with connection.cursor() as cursor:
        return table_name in connection.introspection.table_names(cursor)


def drop_staging_table(table_name: str) -> bool:
    """
    Drop a staging table if it exists.

    Only names carrying the staging prefix are accepted.

    Returns:
        True if a table was dropped
    """
    if not table_name.startswith(STAGING_TABLE_PREFIX):
        raise ValueError(f"Not a staging table: {table_name}")
    if not table_exists(table_name):
        return False

    with connection.cursor() as cursor:
        cursor.execute(f"DROP TABLE {_quote(table_name)}")
    logger.info(f"[IMPORT] Dropped staging table {table_name}")
    return True
