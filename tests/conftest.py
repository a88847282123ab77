from __future__ import annotations

from pathlib import Path

import pytest

from sports.proxy.core.store import (
    EntityStore,
    create_schema,
    create_sessionmaker,
    create_store_engine,
    load_seed_file,
    seed_store,
)

ROOT = Path(__file__).resolve().parents[1]
SEEDS = ROOT / "config" / "seeds"


class FakeClock:
    """Monotonic clock under test control."""

    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def seeds_dir() -> Path:
    return SEEDS


async def _open_store(domain: str):
    engine = create_store_engine("sqlite+aiosqlite:///:memory:")
    await create_schema(engine)
    sessionmaker = create_sessionmaker(engine)
    await seed_store(sessionmaker, load_seed_file(SEEDS / f"{domain}.yaml"), domain=domain)
    return engine, EntityStore(domain=domain, sessionmaker=sessionmaker)


@pytest.fixture
async def baseball_store():
    engine, store = await _open_store("baseball")
    yield store
    await engine.dispose()


@pytest.fixture
async def hockey_store():
    engine, store = await _open_store("hockey")
    yield store
    await engine.dispose()
