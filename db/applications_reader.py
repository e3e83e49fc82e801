"""
Database reader layer for the pipeline tools.

Provides read-only access to the applications table with connection
management and deterministic query execution.
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, List, Optional

from models.errors import (
    create_db_error,
    create_db_not_found_error,
)

# Default database path relative to repository root
DEFAULT_DB_PATH = "data/pipeline.db"

APPLICATION_COLUMNS = """
    id,
    job_id,
    candidate_name,
    candidate_email,
    candidate_phone,
    candidate_id,
    status,
    recruiter_id,
    specialist_id,
    recruiter_notes,
    specialist_notes,
    notes,
    reviewed_at,
    created_at,
    updated_at
"""


def resolve_db_path(db_path: Optional[str] = None) -> Path:
    """
    Resolve the database path with support for overrides and defaults.

    Resolution order:
    1. Provided db_path parameter
    2. PIPELINE_DB environment variable
    3. PIPELINE_ROOT/data/pipeline.db
    4. Default path: data/pipeline.db

    Args:
        db_path: Optional database path override

    Returns:
        Resolved absolute Path to the database
    """
    if db_path is not None:
        path_str = db_path
    else:
        db_env = os.getenv("PIPELINE_DB")
        if db_env:
            path_str = db_env
        else:
            root_env = os.getenv("PIPELINE_ROOT")
            if root_env:
                return Path(root_env) / "data" / "pipeline.db"
            path_str = DEFAULT_DB_PATH

    path = Path(path_str)

    # If relative, resolve from repository root
    if not path.is_absolute():
        repo_root = Path(__file__).resolve().parents[1]  # db/ -> repo/
        path = repo_root / path

    return path


@contextmanager
def get_connection(db_path: Optional[str] = None):
    """
    Context manager for read-only SQLite connections.

    Ensures connections are always properly closed, even on errors.

    Args:
        db_path: Optional database path override

    Yields:
        sqlite3.Connection: Database connection

    Raises:
        ToolError: If database file doesn't exist or connection fails
    """
    resolved_path = resolve_db_path(db_path)

    if not resolved_path.exists() or not resolved_path.is_file():
        raise create_db_not_found_error(str(resolved_path))

    conn = None
    try:
        # URI mode allows the read-only flag
        uri = f"file:{resolved_path}?mode=ro"
        conn = sqlite3.connect(uri, uri=True)
        conn.row_factory = sqlite3.Row

        yield conn

    except sqlite3.OperationalError as e:
        error_msg = str(e)
        if "unable to open database" in error_msg.lower():
            raise create_db_not_found_error(str(resolved_path)) from e
        else:
            raise create_db_error(error_msg, retryable=True, original_error=e) from e

    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e

    finally:
        if conn is not None:
            conn.close()


def list_applications(conn: sqlite3.Connection, job_id: int) -> List[Dict[str, Any]]:
    """
    Query every application for a job in deterministic order.

    Results are ordered by (updated_at DESC, id DESC) so the most recently
    moved candidates come first.

    Args:
        conn: Database connection
        job_id: Owning job

    Returns:
        List of application rows as dictionaries

    Raises:
        ToolError: If query execution fails
    """
    try:
        cursor = conn.execute(
            f"""
            SELECT {APPLICATION_COLUMNS}
            FROM applications
            WHERE job_id = ?
            ORDER BY updated_at DESC, id DESC
            """,
            (job_id,),
        )
        return [dict(row) for row in cursor.fetchall()]

    except sqlite3.Error as e:
        raise create_db_error(str(e), retryable=False, original_error=e) from e
