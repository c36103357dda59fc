"""Test fixtures — mock Supabase client, fake AI backend, and shared test data."""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from prompt_craft.core.errors import ExternalServiceError
from prompt_craft.core.models import ChatMessage, PromptConfig, SessionContext
from prompt_craft.db.client import SupabaseClient

USER_ID = "user-1"

# Child tables removed with their parent row, as the database foreign keys do.
CASCADES: dict[str, list[tuple[str, str]]] = {
    "prompt_libraries": [("prompts", "library_id")],
    "prompts": [("prompt_versions", "prompt_id")],
    "teams": [("team_members", "team_id"), ("invites", "team_id")],
}


class MockSupabaseClient(SupabaseClient):
    """In-memory mock of the Supabase client for testing."""

    def __init__(self):
        self._tables: dict[str, list[dict[str, Any]]] = {
            "prompt_libraries": [],
            "prompts": [],
            "prompt_versions": [],
            "teams": [],
            "team_members": [],
            "invites": [],
            "profiles": [],
        }
        self.fail_on: set[tuple[str, str]] = set()

    def _check(self, operation: str, table: str) -> None:
        if (operation, table) in self.fail_on:
            raise ConnectionError(f"{operation} on {table} failed")

    def insert(self, table: str, data: dict[str, Any]) -> dict[str, Any]:
        self._check("insert", table)
        record = {
            "id": str(uuid4()),
            "created_at": datetime.now(timezone.utc).isoformat(),
            **data,
        }
        self._tables.setdefault(table, []).append(record)
        return dict(record)

    def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
    ) -> list[dict[str, Any]]:
        self._check("select", table)
        rows = self._tables.get(table, [])
        if filters:
            for key, value in filters.items():
                rows = [r for r in rows if r.get(key) == value]
        if order_by:
            rows = sorted(rows, key=lambda r: r.get(order_by) or "")
        return [dict(r) for r in rows]

    def update(self, table: str, id: str, data: dict[str, Any]) -> dict[str, Any]:
        self._check("update", table)
        for row in self._tables.get(table, []):
            if row["id"] == id:
                row.update(data)
                return dict(row)
        raise LookupError(f"Row {id} not found in {table}")

    def delete(self, table: str, id: str) -> None:
        self._check("delete", table)
        self._tables[table] = [r for r in self._tables.get(table, []) if r["id"] != id]
        for child, column in CASCADES.get(table, []):
            for row in [r for r in self._tables.get(child, []) if r.get(column) == id]:
                self.delete(child, row["id"])

    def rows(self, table: str) -> list[dict[str, Any]]:
        return self._tables.get(table, [])

    def reset(self):
        for table in self._tables:
            self._tables[table] = []


class FakeLLM:
    """Stand-in for LLMClient with scripted responses."""

    def __init__(self):
        self.fragments: list[str] = ["Hel", "lo"]
        self.stream_error: Exception | None = None
        self.parse_result: PromptConfig | None = None
        self.parse_error: Exception | None = None
        self.suggestion = "A sharper suggestion."
        self.calls: list[tuple[str, Any]] = []
        self.images: list[str | None] = []

    async def stream_chat(
        self,
        system_prompt: str,
        history: Sequence[ChatMessage],
        message: str,
        image: str | None = None,
    ) -> AsyncIterator[str]:
        self.calls.append(("chat", (system_prompt, list(history), message)))
        self.images.append(image)
        for fragment in self.fragments:
            yield fragment
        if self.stream_error is not None:
            raise self.stream_error

    async def suggest(self, field: str, current_value: str) -> str:
        self.calls.append(("suggest", (field, current_value)))
        return self.suggestion

    async def parse_to_config(self, text: str) -> PromptConfig:
        self.calls.append(("parse", text))
        if self.parse_error is not None:
            raise self.parse_error
        if self.parse_result is None:
            raise ExternalServiceError("no parse result scripted")
        return self.parse_result


@pytest.fixture
def mock_db() -> MockSupabaseClient:
    """Fresh mock database for each test."""
    return MockSupabaseClient()


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def ctx() -> SessionContext:
    return SessionContext(user_id=USER_ID)


@pytest.fixture
def store(mock_db):
    from prompt_craft.db.repository import StoreRepository

    return StoreRepository(mock_db)


@pytest.fixture
def registry(store):
    from prompt_craft.core.registry import PromptRegistry

    return PromptRegistry(store)


@pytest.fixture
def vcs(store):
    from prompt_craft.core.vcs import VersionControl

    return VersionControl(store)


@pytest.fixture
def parser(fake_llm):
    from prompt_craft.core.parser import PromptParser

    return PromptParser(fake_llm)


@pytest.fixture
def bob_config() -> PromptConfig:
    return PromptConfig(persona="You are Bob", skills=["x"], personality="Casual")


@pytest.fixture
def library(store, ctx):
    """A library owned by the test user."""
    return store.create_library("Marketing", ctx)


@pytest.fixture
def app(mock_db, fake_llm):
    """FastAPI test app with mocked dependencies."""
    from prompt_craft.core.llm import get_llm_client
    from prompt_craft.core.registry import PromptRegistry, get_registry
    from prompt_craft.core.teams import TeamDirectory, get_team_directory
    from prompt_craft.core.vcs import VersionControl, get_vcs
    from prompt_craft.db.client import get_supabase_client
    from prompt_craft.db.repository import StoreRepository, get_repository
    from prompt_craft.main import app as _app

    store = StoreRepository(mock_db)

    _app.dependency_overrides[get_supabase_client] = lambda: mock_db
    _app.dependency_overrides[get_repository] = lambda: store
    _app.dependency_overrides[get_registry] = lambda: PromptRegistry(store)
    _app.dependency_overrides[get_vcs] = lambda: VersionControl(store)
    _app.dependency_overrides[get_team_directory] = lambda: TeamDirectory(store)
    _app.dependency_overrides[get_llm_client] = lambda: fake_llm

    yield _app

    _app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    """HTTP test client acting as the test user."""
    return TestClient(app, headers={"X-User-ID": USER_ID})
