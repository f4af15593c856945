"""
Database Connection and Operations

Connection to the Redshift warehouse that holds the order table, and the
three operations the order store needs: read a query into a polars
DataFrame, run a statement, and append rows.

Every call ends its transaction before returning (commit on success,
rollback on failure). The connection is shared, so a read left open would
pin later reads to an old snapshot and a failed statement would poison the
next one.

Connection parameters default to the constants below and can be overridden
with SHIPPING_DB_* environment variables. The password is read from
SHIPPING_DB_PASSWORD or, failing that, from pass.txt next to this file.
"""

import os
from pathlib import Path
from typing import Optional

import pandas as pd
import polars as pl
import redshift_connector

from shared.logging_config import get_logger


# Database connection parameters
HOST = os.environ.get("SHIPPING_DB_HOST", "localhost")
PORT = int(os.environ.get("SHIPPING_DB_PORT", "5439"))
DBNAME = os.environ.get("SHIPPING_DB_NAME", "crm")
USER = os.environ.get("SHIPPING_DB_USER", "shipping_desk")

PASSWORD_FILE = Path(__file__).parent / "pass.txt"

log = get_logger(__name__)

_connection: Optional[redshift_connector.Connection] = None


# ============================================================================
# CONNECTION
# ============================================================================

def _read_password() -> str:
    """
    Raises:
        RuntimeError: If no password is configured
    """
    password = os.environ.get("SHIPPING_DB_PASSWORD")
    if password:
        return password

    if PASSWORD_FILE.exists():
        lines = [line.strip() for line in PASSWORD_FILE.read_text(encoding="utf-8").splitlines()]
        password = next((line for line in lines if line), None)
        if password:
            return password

    raise RuntimeError(
        f"Password not found. Set SHIPPING_DB_PASSWORD or create {PASSWORD_FILE}"
    )


def get_connection() -> redshift_connector.Connection:
    """
    Return the shared connection, opening it on first use.

    Raises:
        RuntimeError: If the connection cannot be established
    """
    global _connection

    if _connection is None:
        try:
            _connection = redshift_connector.connect(
                host=HOST,
                database=DBNAME,
                port=PORT,
                user=USER,
                password=_read_password(),
            )
        except RuntimeError:
            raise
        except Exception as e:
            raise RuntimeError(f"Failed to connect to {HOST}:{PORT}/{DBNAME}: {e}") from e
        log.info(f"Connected to {HOST}:{PORT}/{DBNAME} as {USER}")

    return _connection


def close_connection() -> None:
    """Close the shared connection if one is open."""
    global _connection

    if _connection is None:
        return
    try:
        _connection.close()
    except Exception as e:
        log.warning(f"Error while closing database connection: {e}")
    finally:
        _connection = None


# ============================================================================
# OPERATIONS
# ============================================================================

def pull_data(query: str) -> pl.DataFrame:
    """
    Run a SELECT and return the rows as a polars DataFrame.

    The read transaction is committed after fetching so the next call sees
    rows committed by other sessions in the meantime.

    Raises:
        RuntimeError: If the query fails (the transaction is rolled back)

    Example:
        df = pull_data("SELECT * FROM crm.orders WHERE shipping_company = 'NONE'")
    """
    conn = get_connection()

    try:
        cursor = conn.cursor()
        cursor.execute(query)
        columns = [desc[0] for desc in cursor.description]
        rows = cursor.fetchall()
        cursor.close()
        conn.commit()
    except Exception as e:
        conn.rollback()
        raise RuntimeError(f"Error executing query: {e}") from e

    return pl.DataFrame(rows, schema=columns, orient="row")


def execute_query(query: str, commit: bool = True) -> None:
    """
    Run a statement that returns no rows.

    With commit=False the statement stays in the open transaction and is
    committed by the next push_data() or execute_query(commit=True).

    Raises:
        RuntimeError: If the statement fails (the transaction is rolled back)
    """
    conn = get_connection()

    try:
        cursor = conn.cursor()
        cursor.execute(query)
        cursor.close()
        if commit:
            conn.commit()
    except Exception as e:
        conn.rollback()
        raise RuntimeError(f"Error executing query: {e}") from e


def format_value(value) -> str:
    """Render a Python value as a SQL literal."""
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    if hasattr(value, "isoformat"):  # date/datetime
        return "'" + value.isoformat() + "'"
    return str(value)


def push_data(
    data: pl.DataFrame,
    table_name: str,
    batch_size: int = 5000,
    verbose: bool = True,
) -> None:
    """
    Append a DataFrame to an existing table with batched INSERTs.

    All batches, and any statement left open by execute_query(commit=False),
    are committed together at the end.

    Args:
        data: Rows to insert; column names must match the table
        table_name: Full table name ("schema.table")
        batch_size: Rows per INSERT statement
        verbose: Log progress

    Raises:
        ValueError: If table_name has no schema
        RuntimeError: If any INSERT fails (everything is rolled back)
    """
    if "." not in table_name:
        raise ValueError(f"table_name must include schema: 'schema.table_name', got '{table_name}'")

    if len(data) == 0:
        if verbose:
            log.warning("DataFrame is empty, nothing to upload")
        return

    conn = get_connection()
    column_list = ", ".join(data.columns)
    rows = data.rows()

    try:
        cursor = conn.cursor()
        for start in range(0, len(rows), batch_size):
            batch = rows[start:start + batch_size]
            values = ", ".join(
                "(" + ", ".join(format_value(v) for v in row) + ")" for row in batch
            )
            cursor.execute(f"INSERT INTO {table_name} ({column_list}) VALUES {values}")
            if verbose:
                log.info(f"  Rows {start + 1:,}-{start + len(batch):,} inserted into {table_name}")
        cursor.close()
        conn.commit()
    except Exception as e:
        conn.rollback()
        raise RuntimeError(f"Error uploading data: {e}") from e

    if verbose:
        log.info(f"Uploaded {len(rows):,} rows to {table_name}")


__all__ = [
    "get_connection",
    "close_connection",
    "pull_data",
    "execute_query",
    "push_data",
    "format_value",
]
