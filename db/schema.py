"""
Schema bootstrap for the pipeline database.

Creates the ``applications`` table (one row per candidate per job) and the
``application_events`` audit table that records every accepted transition
together with its side-effect intents.
"""

import sqlite3

from models.errors import create_db_error

APPLICATIONS_DDL = """
    CREATE TABLE IF NOT EXISTS applications (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        job_id INTEGER NOT NULL,
        candidate_name TEXT NOT NULL,
        candidate_email TEXT NOT NULL,
        candidate_phone TEXT,
        candidate_id INTEGER,
        status TEXT NOT NULL DEFAULT 'pending',
        recruiter_id INTEGER,
        specialist_id INTEGER,
        recruiter_notes TEXT,
        specialist_notes TEXT,
        notes TEXT,
        reviewed_at TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        UNIQUE (job_id, candidate_email)
    )
"""

APPLICATION_EVENTS_DDL = """
    CREATE TABLE IF NOT EXISTS application_events (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        application_id INTEGER NOT NULL,
        job_id INTEGER NOT NULL,
        from_status TEXT,
        to_status TEXT NOT NULL,
        actor_role TEXT NOT NULL,
        actor_id INTEGER,
        intents_json TEXT NOT NULL DEFAULT '[]',
        created_at TEXT NOT NULL
    )
"""

REQUIRED_APPLICATION_COLUMNS = (
    "id",
    "job_id",
    "candidate_name",
    "candidate_email",
    "status",
    "recruiter_id",
    "specialist_id",
    "reviewed_at",
    "created_at",
    "updated_at",
)


def bootstrap_schema(conn: sqlite3.Connection) -> None:
    """
    Create pipeline tables and indexes if they don't exist.

    This operation is idempotent - safe to call on existing databases.

    Args:
        conn: Database connection

    Raises:
        ToolError: If schema creation fails
    """
    try:
        conn.execute(APPLICATIONS_DDL)
        conn.execute(APPLICATION_EVENTS_DDL)
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_applications_job_status "
            "ON applications(job_id, status)"
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_application_events_application "
            "ON application_events(application_id)"
        )
        conn.commit()

    except sqlite3.Error as e:
        raise create_db_error(
            f"Failed to bootstrap schema: {str(e)}", retryable=False, original_error=e
        ) from e
