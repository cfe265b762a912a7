"""
tests/conftest.py

Shared fixtures: an in-memory SQLite milestone store and in-memory fakes
for the store and audit sink ports.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterator
from contextlib import contextmanager
from enum import Enum
from typing import Any, Mapping

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import get_milestone_import_settings
from app.domain.milestone_import import AuditEntry, MilestoneRecord, ProjectRef, StoredMilestone
from db.base import Base
from db.models import Department, Project, User
from db.repositories.errors import StoreError


# ---------------------------------------------------------------------------
# In-memory port fakes
# ---------------------------------------------------------------------------


class InMemoryMilestoneStore:
    """
    Dict-backed MilestoneStore. ``row_scope`` restores the milestone map on
    any exception, like a rolled-back transaction.
    """

    def __init__(self) -> None:
        self.projects: list[ProjectRef] = []
        self.milestones: dict[int, StoredMilestone] = {}
        self.created_by: dict[int, int | None] = {}
        self.descriptions: dict[int, str | None] = {}
        self.update_calls: list[tuple[int, dict[str, Any]]] = []
        self.ping_error: Exception | None = None
        self.failing_lookup_keys: set[str] = set()
        self.failing_insert_titles: set[str] = set()
        self.commits = 0
        self.rollbacks = 0
        self._next_id = 1

    def add_project(
        self,
        title: str,
        *,
        manager_user_id: int | None = None,
        department_id: int | None = None,
    ) -> ProjectRef:
        project = ProjectRef(
            id=len(self.projects) + 1,
            title=title,
            manager_user_id=manager_user_id,
            department_id=department_id,
        )
        self.projects.append(project)
        return project

    def ping(self) -> None:
        if self.ping_error is not None:
            raise self.ping_error

    def find_project_by_key(self, key: str) -> ProjectRef | None:
        if key in self.failing_lookup_keys:
            raise StoreError("project lookup timed out")
        for project in self.projects:
            if project.title.lower() == key.strip().lower():
                return project
        return None

    def find_milestone(self, project_key: str, title: str) -> StoredMilestone | None:
        project = self.find_project_by_key(project_key)
        if project is None:
            return None
        for milestone in self.milestones.values():
            if milestone.project_id == project.id and milestone.title == title:
                return milestone
        return None

    def insert_milestone(self, record: MilestoneRecord, *, created_by_user_id: int | None = None) -> int:
        if record.title in self.failing_insert_titles:
            raise StoreError(f"insert failed for {record.title}")
        project = self.find_project_by_key(record.project_key)
        assert project is not None
        milestone_id = self._next_id
        self._next_id += 1
        self.milestones[milestone_id] = StoredMilestone(
            id=milestone_id,
            project_id=project.id,
            title=record.title,
            deadline=record.deadline,
            completion_percentage=record.completion_percentage,
            status=record.status.value,
        )
        self.created_by[milestone_id] = created_by_user_id
        self.descriptions[milestone_id] = record.description
        return milestone_id

    def update_milestone(self, milestone_id: int, changed_fields: Mapping[str, Any]) -> None:
        values = {
            name: value.value if isinstance(value, Enum) else value
            for name, value in changed_fields.items()
        }
        self.update_calls.append((milestone_id, values))
        self.milestones[milestone_id] = dataclasses.replace(self.milestones[milestone_id], **values)

    @contextmanager
    def row_scope(self) -> Iterator[None]:
        snapshot = dict(self.milestones)
        try:
            yield
        except BaseException:
            self.milestones = snapshot
            self.rollbacks += 1
            raise
        self.commits += 1


class RecordingAuditSink:
    def __init__(self, *, fail: bool = False) -> None:
        self.entries: list[AuditEntry] = []
        self.fail = fail

    def append(self, entry: AuditEntry) -> None:
        if self.fail:
            raise RuntimeError("audit table unavailable")
        self.entries.append(entry)


@pytest.fixture()
def memory_store() -> InMemoryMilestoneStore:
    store = InMemoryMilestoneStore()
    store.add_project("Alpha", manager_user_id=11, department_id=3)
    store.add_project("Beta", manager_user_id=12, department_id=3)
    return store


@pytest.fixture()
def audit_sink() -> RecordingAuditSink:
    return RecordingAuditSink()


# ---------------------------------------------------------------------------
# SQLite milestone store
# ---------------------------------------------------------------------------


@pytest.fixture()
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # pysqlite only supports SAVEPOINT when SQLAlchemy emits BEGIN itself.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def session_factory(sqlite_engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=sqlite_engine,
        class_=Session,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture()
def sqlite_session(session_factory: sessionmaker) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def seeded_session(sqlite_session: Session) -> Session:
    """
    Session with one department, two users and three projects committed.
    """

    department = Department(id=1, name="Infrastructure", code="INF")
    manager = User(id=10, name="Manager", username="manager", email="manager@example.com", department_id=1)
    importer = User(id=20, name="Importer", username="importer", email="importer@example.com", department_id=1)
    sqlite_session.add_all([department, manager, importer])
    sqlite_session.flush()
    sqlite_session.add_all(
        [
            Project(id=1, title="Alpha", manager_user_id=10, department_id=1, status="Planning"),
            Project(id=2, title="Harbour Expansion [C-2017-044]", manager_user_id=10, department_id=1, status="Planning"),
            Project(id=3, title="Ring Road 50%_phase", manager_user_id=None, department_id=1, status="Planning"),
        ]
    )
    sqlite_session.commit()
    return sqlite_session


@pytest.fixture(autouse=True)
def _reset_cached_settings() -> Iterator[None]:
    get_milestone_import_settings.cache_clear()
    yield
    get_milestone_import_settings.cache_clear()
