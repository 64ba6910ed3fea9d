import asyncio
import random

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from talks.app_state import build_services
from talks.db import DocumentStore, init_db
from talks.errors import CollaboratorError
from talks.models import SessionDraft


class FakeAdvisor:
    """Stands in for the text-generation service. ``gate`` holds replies back."""

    def __init__(self, reply: str = "Check the saved return address.", fail: bool = False):
        self.reply = reply
        self.fail = fail
        self.queries: list[str] = []
        self.gate: asyncio.Event | None = None

    async def advise(self, query: str) -> str:
        self.queries.append(query)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise CollaboratorError("advice service unavailable")
        return self.reply

    async def draft_session(self, topic: str) -> SessionDraft:
        if self.fail:
            raise CollaboratorError("draft service unavailable")
        return SessionDraft(
            title=f"{topic}: From Crash to Shell",
            description=f"A hands-on walk through {topic}.",
            tags=["Binary", "Exploit Dev"],
        )


@pytest.fixture
def engine():
    # One shared connection so every Session sees the same in-memory database
    eng = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    init_db(eng)
    return eng


@pytest.fixture
def documents(engine) -> DocumentStore:
    return DocumentStore(engine)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1337)


@pytest.fixture
def advisor() -> FakeAdvisor:
    return FakeAdvisor()


@pytest.fixture
def services(engine, advisor):
    return build_services(engine=engine, advisor=advisor, seed=1337)
