import asyncio
import importlib.util
from pathlib import Path

from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import create_engine, inspect

from login_throttle.core.database import build_engine, create_attempt_store

VERSIONS_DIR = Path(__file__).resolve().parents[1] / "alembic" / "versions"


def _load_revision(name: str):
    spec = importlib.util.spec_from_file_location(f"revision_{name}", VERSIONS_DIR / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _apply(url: str, step: str) -> None:
    revision = _load_revision("0001_attempts")
    engine = create_engine(url)
    try:
        with engine.begin() as conn:
            with Operations.context(MigrationContext.configure(conn)):
                getattr(revision, step)()
    finally:
        engine.dispose()


def test_upgrade_creates_attempts_table(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    _apply(url, "upgrade")

    engine = create_engine(url)
    try:
        inspector = inspect(engine)
        columns = {column["name"] for column in inspector.get_columns("attempts")}
        primary_key = inspector.get_pk_constraint("attempts")["constrained_columns"]
    finally:
        engine.dispose()
    assert columns == {"identifier", "failed_attempts", "last_attempt_at"}
    assert primary_key == ["identifier"]


def test_downgrade_drops_attempts_table(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    _apply(url, "upgrade")
    _apply(url, "downgrade")

    engine = create_engine(url)
    try:
        assert "attempts" not in inspect(engine).get_table_names()
    finally:
        engine.dispose()


def test_migrated_schema_serves_sql_store(tmp_path) -> None:
    path = tmp_path / "migrated.db"
    _apply(f"sqlite:///{path}", "upgrade")

    async def scenario():
        engine = build_engine(f"sqlite+aiosqlite:///{path}")
        try:
            store = create_attempt_store(engine)
            await store.increment("alice@example.com", 100)
            return await store.increment("alice@example.com", 200)
        finally:
            await engine.dispose()

    record = asyncio.run(scenario())
    assert record.failed_attempts == 2
    assert record.last_attempt_at == 200
