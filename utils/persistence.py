"""
Project persistence.

ProjectStore keeps one Project per target URL in SQLite. Each project holds
at most one result per kind (siteAnalysis, seoSuggestions, topicCluster,
articleGeneration), overwritten on regeneration.

Known limitation: there is no write arbitration. upsert_result() reads the
project, edits its data map and writes it back; two concurrent writers
(two browser tabs, two workers) can overwrite each other. The store is
meant for a single user.

If SQLite becomes unusable the store logs the failure and keeps serving
from an in-memory dict for the rest of the process instead of failing
requests.
"""

import hashlib
import json
import os
import sqlite3
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, TypeVar
from urllib.parse import urlparse

from loguru import logger
from pydantic import ValidationError as SchemaValidationError

from core.data_models import RESULT_KINDS, Project, ProjectResult, utc_now_iso
from utils.error_utils import PersistenceError, safe_execute

T = TypeVar("T")

DB_PATH = os.getenv("PROJECTS_DB_PATH", "./projects.db")
MEMORY_DB = ":memory:"


@safe_execute({}, ValueError, TypeError)
def _decode_data(raw: Optional[str]) -> Dict[str, Any]:
    decoded = json.loads(raw or "{}")
    if not isinstance(decoded, dict):
        raise ValueError("project data is not a JSON object")
    return decoded


def default_project_name(url: str) -> str:
    host = urlparse(url).hostname or url
    if host.startswith("www."):
        host = host[len("www."):]
    return f"{host}のプロジェクト"


class ProjectStore:
    """SQLite-backed project store with an in-memory fallback."""

    def __init__(self, db_path: Optional[str] = None) -> None:
        self.db_path = db_path or DB_PATH
        self._shared_conn: Optional[sqlite3.Connection] = None
        # set once SQLite has failed; from then on every call is served here
        self._memory: Optional[Dict[str, Project]] = None
        self._run(self._init_db, lambda: None)

    # ------------------------------------------------------------------ #
    # Plumbing
    # ------------------------------------------------------------------ #

    @property
    def degraded(self) -> bool:
        return self._memory is not None

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        if self.db_path == MEMORY_DB:
            # a fresh :memory: connection would be a fresh, empty database
            if self._shared_conn is None:
                self._shared_conn = sqlite3.connect(MEMORY_DB, check_same_thread=False)
                self._shared_conn.row_factory = sqlite3.Row
            yield self._shared_conn
            return

        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _run(self, db_op: Callable[[], T], memory_op: Callable[[], T]) -> T:
        if self._memory is None:
            try:
                return db_op()
            except sqlite3.Error as exc:
                err = PersistenceError(f"Project store at {self.db_path} unavailable: {exc}")
                logger.error("{}; continuing with in-memory projects", err)
                self._memory = {}
        return memory_op()

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS projects (
                    id TEXT PRIMARY KEY,
                    url TEXT NOT NULL,
                    name TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    data_json TEXT NOT NULL DEFAULT '{}'
                )
                """
            )
            conn.commit()
        logger.info("Project store initialized at {}", self.db_path)

    @staticmethod
    def _row_to_project(row: sqlite3.Row) -> Project:
        data: Dict[str, ProjectResult] = {}
        for kind, value in _decode_data(row["data_json"]).items():
            if kind not in RESULT_KINDS or not isinstance(value, dict):
                continue
            try:
                data[kind] = ProjectResult.model_validate(value)
            except SchemaValidationError as exc:
                logger.warning("Dropping unreadable {} result for project {}: {}", kind, row["id"], exc.error_count())
        return Project(
            id=row["id"],
            name=row["name"],
            url=row["url"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            data=data,
        )

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    @staticmethod
    def id_for(url: str) -> str:
        """Stable project id: SHA-256 hex digest of the URL."""
        return hashlib.sha256(url.encode("utf-8")).hexdigest()

    def save(self, project: Project) -> Project:
        """Insert or replace a project record."""

        def db_op() -> Project:
            data_json = json.dumps(
                {kind: result.model_dump(by_alias=True, exclude_none=True) for kind, result in project.data.items()},
                ensure_ascii=False,
            )
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO projects (id, url, name, created_at, updated_at, data_json)
                    VALUES (?, ?, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        url = excluded.url,
                        name = excluded.name,
                        updated_at = excluded.updated_at,
                        data_json = excluded.data_json
                    """,
                    (
                        project.id,
                        project.url,
                        project.name,
                        project.created_at,
                        project.updated_at,
                        data_json,
                    ),
                )
                conn.commit()
            return project

        def memory_op() -> Project:
            self._memory[project.id] = project.model_copy(deep=True)
            return project

        return self._run(db_op, memory_op)

    def create(self, url: str, name: Optional[str] = None) -> Project:
        """Create (or reset) the project for ``url`` with an empty data map."""
        now = utc_now_iso()
        project = Project(
            id=self.id_for(url),
            name=name or default_project_name(url),
            url=url,
            created_at=now,
            updated_at=now,
            data={},
        )
        logger.info("Creating project {} for {}", project.id, url)
        return self.save(project)

    def get(self, project_id: str) -> Optional[Project]:
        def db_op() -> Optional[Project]:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT * FROM projects WHERE id = ?",
                    (project_id,),
                ).fetchone()
            return self._row_to_project(row) if row else None

        def memory_op() -> Optional[Project]:
            project = self._memory.get(project_id)
            return project.model_copy(deep=True) if project else None

        return self._run(db_op, memory_op)

    def get_by_url(self, url: str) -> Optional[Project]:
        return self.get(self.id_for(url))

    def get_or_create(self, url: str) -> Project:
        return self.get_by_url(url) or self.create(url)

    def upsert_result(
        self,
        project_id: str,
        kind: str,
        result: str,
        topic: Optional[str] = None,
    ) -> Optional[Project]:
        """
        Store ``result`` under ``kind`` and bump updated_at.

        Returns the updated project, or None when the project does not exist.
        """
        if kind not in RESULT_KINDS:
            raise ValueError(f"Unknown result kind: {kind!r}")

        project = self.get(project_id)
        if project is None:
            return None

        now = utc_now_iso()
        if kind in ("topicCluster", "articleGeneration"):
            topic = topic or ""
        project.data[kind] = ProjectResult(result=result, generated_at=now, topic=topic)
        project.updated_at = max(now, project.updated_at)
        return self.save(project)

    def delete(self, project_id: str) -> bool:
        def db_op() -> bool:
            with self._connect() as conn:
                cursor = conn.execute("DELETE FROM projects WHERE id = ?", (project_id,))
                conn.commit()
                return cursor.rowcount > 0

        def memory_op() -> bool:
            return self._memory.pop(project_id, None) is not None

        deleted = self._run(db_op, memory_op)
        if deleted:
            logger.info("Deleted project {}", project_id)
        return deleted

    def list_projects(self, limit: int = 50) -> List[Project]:
        """Most recently updated first."""
        safe_limit = max(1, min(500, int(limit)))

        def db_op() -> List[Project]:
            with self._connect() as conn:
                rows = conn.execute(
                    "SELECT * FROM projects ORDER BY updated_at DESC LIMIT ?",
                    (safe_limit,),
                ).fetchall()
            return [self._row_to_project(row) for row in rows]

        def memory_op() -> List[Project]:
            projects = sorted(self._memory.values(), key=lambda p: p.updated_at, reverse=True)
            return [p.model_copy(deep=True) for p in projects[:safe_limit]]

        return self._run(db_op, memory_op)
