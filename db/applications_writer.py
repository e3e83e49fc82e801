"""
Database writer layer for the pipeline tools.

Provides write access to the applications table with transaction management.
Status changes are compare-and-swap updates keyed on the status the engine
validated against, so two racing requests cannot both apply. Writers opened
with ``immediate=True`` take the write lock before reading, so a competing
request waits, then reads the committed status and is validated against it.
Lock contention that outlasts the busy timeout surfaces as a retryable error.
"""

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set

from db.applications_reader import APPLICATION_COLUMNS, resolve_db_path
from db.schema import REQUIRED_APPLICATION_COLUMNS, bootstrap_schema
from models.errors import (
    ToolError,
    create_db_error,
    create_db_not_found_error,
    create_not_found_error,
    create_stale_state_error,
)

logger = logging.getLogger(__name__)

# Seconds a writer waits on a competing write lock before giving up
DEFAULT_BUSY_TIMEOUT = 5.0


def _map_sqlite_error(error: sqlite3.Error) -> ToolError:
    """Lock contention is retryable; every other SQLite failure is not."""
    message = str(error)
    retryable = isinstance(error, sqlite3.OperationalError) and (
        "locked" in message.lower() or "busy" in message.lower()
    )
    return create_db_error(message, retryable=retryable, original_error=error)


class ApplicationsWriter:
    """
    Context manager for write operations on the pipeline database.

    Provides transaction management with automatic rollback on exceptions
    and guaranteed connection cleanup.

    Usage:
        with ApplicationsWriter(db_path) as writer:
            row = writer.fetch_application(42)
            writer.save_transition(42, "pending", "reviewing", timestamp, timestamp)
            writer.record_event(...)
            writer.commit()
    """

    def __init__(
        self,
        db_path: Optional[str] = None,
        bootstrap: bool = False,
        immediate: bool = False,
        timeout: float = DEFAULT_BUSY_TIMEOUT,
    ):
        """
        Initialize writer with database path.

        Args:
            db_path: Optional database path override
            bootstrap: Create the database file and schema if missing
            immediate: Take the write lock before the first read, so a
                read-validate-write sequence runs serialized against other writers
            timeout: Seconds to wait for a competing writer to release the lock
        """
        self.db_path = db_path
        self.bootstrap = bootstrap
        self.immediate = immediate
        self.timeout = timeout
        self.resolved_path: Optional[Path] = None
        self.conn: Optional[sqlite3.Connection] = None
        self._in_transaction = False

    def __enter__(self):
        """
        Open connection and begin transaction.

        Returns:
            self: The ApplicationsWriter instance

        Raises:
            ToolError: If database file doesn't exist or connection fails
        """
        self.resolved_path = resolve_db_path(self.db_path)

        if self.bootstrap:
            try:
                self.resolved_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise create_db_error(
                    f"Failed to create parent directories: {str(e)}",
                    retryable=False,
                    original_error=e,
                ) from e
        elif not self.resolved_path.exists() or not self.resolved_path.is_file():
            raise create_db_not_found_error(str(self.resolved_path))

        try:
            self.conn = sqlite3.connect(str(self.resolved_path), timeout=self.timeout)
            self.conn.row_factory = sqlite3.Row

            if self.bootstrap:
                bootstrap_schema(self.conn)

            self.conn.execute("BEGIN IMMEDIATE" if self.immediate else "BEGIN")
            self._in_transaction = True

            return self

        except sqlite3.OperationalError as e:
            if self.conn is not None:
                self.conn.close()
                self.conn = None
            error_msg = str(e)
            if "unable to open database" in error_msg.lower():
                raise create_db_not_found_error(str(self.resolved_path)) from e
            else:
                raise create_db_error(error_msg, retryable=True, original_error=e) from e

        except sqlite3.Error as e:
            if self.conn is not None:
                self.conn.close()
                self.conn = None
            raise _map_sqlite_error(e) from e

    def __exit__(self, exc_type, exc_val, exc_tb):
        """
        Rollback on exception, close connection always.

        Returns:
            False to propagate exceptions
        """
        try:
            if exc_type is not None and self._in_transaction:
                self.rollback()
        finally:
            if self.conn is not None:
                self.conn.close()
                self.conn = None

        return False

    def _require_connection(self) -> sqlite3.Connection:
        if self.conn is None:
            raise create_db_error("Connection not established", retryable=False)
        return self.conn

    def ensure_pipeline_columns(self) -> None:
        """
        Verify that the applications table has every column the pipeline writes.

        Raises:
            ToolError: If the table or any required column is missing
        """
        conn = self._require_connection()

        try:
            cursor = conn.execute("PRAGMA table_info(applications)")
            column_names = [col["name"] for col in cursor.fetchall()]

            if not column_names:
                raise create_db_error(
                    "Schema error: applications table is missing. Database bootstrap required.",
                    retryable=False,
                )

            missing = [col for col in REQUIRED_APPLICATION_COLUMNS if col not in column_names]
            if missing:
                missing_str = ", ".join(f"'{col}'" for col in missing)
                raise create_db_error(
                    f"Schema error: applications table is missing required columns: "
                    f"{missing_str}. Database migration required.",
                    retryable=False,
                )

        except sqlite3.Error as e:
            raise _map_sqlite_error(e) from e

    def fetch_application(self, application_id: int) -> Optional[Dict[str, Any]]:
        """
        Read an application row inside the current transaction.

        Returns:
            Row as a dictionary, or None if it doesn't exist
        """
        conn = self._require_connection()

        try:
            cursor = conn.execute(
                f"SELECT {APPLICATION_COLUMNS} FROM applications WHERE id = ?",
                (application_id,),
            )
            row = cursor.fetchone()
            return dict(row) if row is not None else None

        except sqlite3.Error as e:
            raise _map_sqlite_error(e) from e

    def save_transition(
        self,
        application_id: int,
        expected_status: str,
        new_status: str,
        updated_at: str,
        reviewed_at: Optional[str] = None,
    ) -> None:
        """
        Compare-and-swap the status of one application.

        The UPDATE only matches while the stored status still equals
        ``expected_status``. ``reviewed_at`` is left untouched when None.

        Args:
            application_id: The application to update
            expected_status: Status the engine validated against
            new_status: Status to store
            updated_at: ISO 8601 UTC timestamp for updated_at
            reviewed_at: ISO 8601 UTC timestamp for reviewed_at, if stamped

        Raises:
            ToolError: NOT_FOUND if the row is gone, STALE_STATE if another
                request changed the status first, DB_ERROR on failure
        """
        conn = self._require_connection()

        try:
            cursor = conn.execute(
                """
                UPDATE applications
                SET status = ?,
                    updated_at = ?,
                    reviewed_at = COALESCE(?, reviewed_at)
                WHERE id = ? AND status = ?
                """,
                (new_status, updated_at, reviewed_at, application_id, expected_status),
            )

            if cursor.rowcount == 0:
                exists = conn.execute(
                    "SELECT 1 FROM applications WHERE id = ?", (application_id,)
                ).fetchone()
                if exists is None:
                    raise create_not_found_error(application_id)
                raise create_stale_state_error(application_id, expected_status)

        except sqlite3.Error as e:
            raise _map_sqlite_error(e) from e

    def record_event(
        self,
        application_id: int,
        job_id: int,
        from_status: Optional[str],
        to_status: str,
        actor_role: str,
        created_at: str,
        actor_id: Optional[int] = None,
        intents: Optional[List[Dict[str, Any]]] = None,
    ) -> int:
        """
        Append an audit row for an accepted transition.

        Written in the same transaction as the status change so the audit
        trail and the stored status never disagree.

        Returns:
            The new event id
        """
        conn = self._require_connection()

        try:
            cursor = conn.execute(
                """
                INSERT INTO application_events (
                    application_id, job_id, from_status, to_status,
                    actor_role, actor_id, intents_json, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    application_id,
                    job_id,
                    from_status,
                    to_status,
                    actor_role,
                    actor_id,
                    json.dumps(intents or [], sort_keys=True),
                    created_at,
                ),
            )
            return cursor.lastrowid

        except sqlite3.Error as e:
            raise _map_sqlite_error(e) from e

    def find_existing_emails(self, job_id: int, emails: Iterable[str]) -> Set[str]:
        """
        Return which of ``emails`` already have an application for the job.

        Comparison is case-insensitive; returned emails are lowercased.
        """
        conn = self._require_connection()

        emails = [email.lower() for email in emails]
        if not emails:
            return set()

        try:
            placeholders = ",".join("?" * len(emails))
            cursor = conn.execute(
                f"""
                SELECT LOWER(candidate_email) AS email
                FROM applications
                WHERE job_id = ? AND LOWER(candidate_email) IN ({placeholders})
                """,
                [job_id, *emails],
            )
            return {row["email"] for row in cursor.fetchall()}

        except sqlite3.Error as e:
            raise _map_sqlite_error(e) from e

    def insert_application(
        self,
        job_id: int,
        candidate_name: str,
        candidate_email: str,
        status: str,
        timestamp: str,
        candidate_phone: Optional[str] = None,
        candidate_id: Optional[int] = None,
        recruiter_id: Optional[int] = None,
        specialist_id: Optional[int] = None,
    ) -> int:
        """
        Insert a new application row.

        Returns:
            The new application id
        """
        conn = self._require_connection()

        try:
            cursor = conn.execute(
                """
                INSERT INTO applications (
                    job_id, candidate_name, candidate_email, candidate_phone,
                    candidate_id, status, recruiter_id, specialist_id,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    job_id,
                    candidate_name,
                    candidate_email,
                    candidate_phone,
                    candidate_id,
                    status,
                    recruiter_id,
                    specialist_id,
                    timestamp,
                    timestamp,
                ),
            )
            return cursor.lastrowid

        except sqlite3.IntegrityError as e:
            raise create_db_error(
                f"Application already exists for job {job_id}: {str(e)}",
                retryable=False,
                original_error=e,
            ) from e
        except sqlite3.Error as e:
            raise _map_sqlite_error(e) from e

    def assign_staff(
        self,
        job_id: int,
        recruiter_id: Optional[int] = None,
        specialist_id: Optional[int] = None,
        clear_recruiter: bool = False,
        clear_specialist: bool = False,
    ) -> int:
        """
        Set the responsible recruiter and/or specialist for a job's applications.

        Status and updated_at are not touched: reassignment is not a
        pipeline transition. A None id leaves that column unchanged; the
        clear flags set it back to NULL.

        Returns:
            Number of applications updated
        """
        conn = self._require_connection()

        try:
            cursor = conn.execute(
                """
                UPDATE applications
                SET recruiter_id = CASE WHEN ? THEN NULL ELSE COALESCE(?, recruiter_id) END,
                    specialist_id = CASE WHEN ? THEN NULL ELSE COALESCE(?, specialist_id) END
                WHERE job_id = ?
                """,
                (
                    int(clear_recruiter),
                    recruiter_id,
                    int(clear_specialist),
                    specialist_id,
                    job_id,
                ),
            )
            return cursor.rowcount

        except sqlite3.Error as e:
            raise _map_sqlite_error(e) from e

    def commit(self) -> None:
        """
        Commit the transaction.

        Raises:
            ToolError: If commit fails
        """
        conn = self._require_connection()

        if not self._in_transaction:
            return

        try:
            conn.commit()
            self._in_transaction = False

        except sqlite3.Error as e:
            raise create_db_error(
                f"Failed to commit transaction: {str(e)}", retryable=True, original_error=e
            ) from e

    def rollback(self) -> None:
        """
        Rollback the transaction.

        Does not raise: rollback runs during error handling, so failures are
        logged and the original error propagates instead.
        """
        if self.conn is None or not self._in_transaction:
            return

        try:
            self.conn.rollback()
            self._in_transaction = False
        except sqlite3.Error as e:
            logger.warning(f"Rollback failed: {e}")
