import logging
import random
from dataclasses import dataclass

from sqlalchemy.engine import Engine

from talks.advisor import Advisor, OpenAIAdvisor
from talks.db import DocumentStore, init_db, make_engine
from talks.directory import UserDirectory
from talks.media import BrowserMediaDevices, MediaDevices
from talks.room import RoomRegistry
from talks.session import SessionState
from talks.store import MeetingStore

LOGGER = logging.getLogger("talks")


@dataclass
class Services:
    documents: DocumentStore
    meetings: MeetingStore
    users: UserDirectory
    session: SessionState
    advisor: Advisor
    rooms: RoomRegistry


def build_services(
    engine: Engine | None = None,
    advisor: Advisor | None = None,
    media: MediaDevices | None = None,
    seed: int | None = None,
) -> Services:
    """
    Wires the core together and loads every document once (seed-or-restore).
    """
    engine = engine or make_engine()
    init_db(engine)
    documents = DocumentStore(engine)

    meetings = MeetingStore(documents, rng=random.Random(seed))
    meetings.initialize()
    users = UserDirectory(documents)
    users.initialize()
    session = SessionState(documents, users)
    restored = session.restore()
    if restored:
        LOGGER.info("Restored session for %s", restored.username)

    advisor = advisor or OpenAIAdvisor()
    rooms = RoomRegistry(advisor, media or BrowserMediaDevices())
    return Services(
        documents=documents,
        meetings=meetings,
        users=users,
        session=session,
        advisor=advisor,
        rooms=rooms,
    )
