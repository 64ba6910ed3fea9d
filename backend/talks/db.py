import json
import logging
from typing import Any

from sqlalchemy.engine import Engine
from sqlmodel import Field, Session, SQLModel, create_engine

from talks.config import settings

LOGGER = logging.getLogger("talks.db")

MEETINGS_KEY = "meetings_db"
USERS_KEY = "users_db"
SESSION_KEY = "current_session"


class Document(SQLModel, table=True):
    """
    One logical JSON document of the key-value store.
    """

    key: str = Field(primary_key=True)
    value: str


def make_engine(url: str | None = None) -> Engine:
    if url is None:
        settings.db_path.parent.mkdir(parents=True, exist_ok=True)
        url = settings.database_url
    return create_engine(url, echo=False, connect_args={"check_same_thread": False})


def init_db(engine: Engine) -> None:
    SQLModel.metadata.create_all(engine)


class DocumentStore:
    """
    Whole-document key-value store. Every write replaces the stored JSON for
    its key; a missing key reads as ``None``.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def load(self, key: str) -> Any | None:
        with Session(self.engine) as db:
            doc = db.get(Document, key)
            if not doc:
                return None
            try:
                return json.loads(doc.value)
            except json.JSONDecodeError:
                LOGGER.warning("Document %s is not valid JSON, ignoring it.", key)
                return None

    def save(self, key: str, value: Any) -> None:
        with Session(self.engine) as db:
            doc = db.get(Document, key)
            payload = json.dumps(value)
            if not doc:
                doc = Document(key=key, value=payload)
            else:
                doc.value = payload
            db.add(doc)
            db.commit()

    def delete(self, key: str) -> None:
        with Session(self.engine) as db:
            doc = db.get(Document, key)
            if doc:
                db.delete(doc)
                db.commit()
