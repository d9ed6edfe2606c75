import os
from collections.abc import Iterator
from pathlib import Path

import pytest
from sqlalchemy import Engine, create_engine, event, text

from sqlqueue.core.bootstrap import SchemaBootstrapper
from sqlqueue.core.codec import JsonCodec
from sqlqueue.core.queue import SqlQueue

POSTGRES_URL_ENV = "SQLQUEUE_TEST_POSTGRES_URL"


def _sqlite_engine(path: Path) -> Engine:
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    @event.listens_for(engine, "connect")
    def _wal(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    return engine


@pytest.fixture
def engine(tmp_path: Path) -> Iterator[Engine]:
    engine = _sqlite_engine(tmp_path / "queue.db")
    yield engine
    engine.dispose()


@pytest.fixture
def bootstrapper() -> SchemaBootstrapper:
    return SchemaBootstrapper()


@pytest.fixture
def queue(engine: Engine, bootstrapper: SchemaBootstrapper) -> SqlQueue[int]:
    return SqlQueue(engine, "main", "Queue", JsonCodec(int), bootstrapper)


@pytest.fixture
def pg_engine() -> Iterator[Engine]:
    url = os.environ.get(POSTGRES_URL_ENV)
    if not url:
        pytest.skip(f"{POSTGRES_URL_ENV} not set")
    engine = create_engine(url)
    yield engine
    engine.dispose()


@pytest.fixture
def pg_queue(pg_engine: Engine, request: pytest.FixtureRequest) -> Iterator[SqlQueue[int]]:
    name = f"queue_{request.node.name}"[:63]
    q = SqlQueue(pg_engine, "public", name, JsonCodec(int), SchemaBootstrapper())
    yield q
    with pg_engine.begin() as conn:
        conn.execute(text(f'DROP TABLE IF EXISTS public."{name}"'))
