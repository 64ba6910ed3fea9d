import datetime as dt
import logging
import random
import threading
from typing import Callable

from pydantic import ValidationError

from talks.db import MEETINGS_KEY, DocumentStore
from talks.errors import ValidationFailure
from talks.lifecycle import validate_schedule
from talks.models import Meeting, MeetingCreate, MeetingStatus, User

LOGGER = logging.getLogger("talks.store")

RESEARCHERS = ["GhostRoot", "CipherSmith", "KernelPanic", "ShadowByte", "ZeroSum"]
TOPICS = [
    "Buffer Overflow",
    "Cloud Security",
    "Kubernetes Hacking",
    "Zero Trust",
    "Web3 Vulnerabilities",
    "Hardware Hacking",
    "Ransomware Triage",
    "Malware Analysis",
    "Forensics",
    "IoT Exploits",
]
TAGS = ["Binary", "Exploit Dev", "Cloud", "Network", "Mobile", "Crypto", "Red Team", "Blue Team"]

LIVE_COUNT = 10
UPCOMING_COUNT = 55
PAST_COUNT = 60
SEED_SLOTS = 15


def _host(i: int) -> dict:
    return {"host": RESEARCHERS[i % len(RESEARCHERS)], "host_id": f"u{(i % 5) + 1}"}


def generate_seed_meetings(today: dt.date, rng: random.Random) -> list[Meeting]:
    """
    Builds the mock catalogue: live sessions first, then upcoming sessions
    one day apart, then the archive going back one day at a time.
    """
    meetings: list[Meeting] = []

    for i in range(LIVE_COUNT):
        topic = TOPICS[i % len(TOPICS)]
        meetings.append(
            Meeting(
                id=f"live-{i}",
                title=f"LIVE: {topic} Advanced session",
                description="Analyzing live traffic and identifying anomalous patterns in real-time. Join the war room.",
                date=today,
                start_time="NOW",
                max_slots=SEED_SLOTS,
                booked_slots=12,
                tags=[TAGS[i % len(TAGS)], "LIVE"],
                status=MeetingStatus.LIVE,
                **_host(i),
            )
        )

    for i in range(UPCOMING_COUNT):
        topic = TOPICS[i % len(TOPICS)]
        meetings.append(
            Meeting(
                id=f"upcoming-{i}",
                title=f"{topic} - Deep Dive v{i}",
                description=f"Comprehensive research into the latest CVEs affecting {topic} environments. Practical demos included.",
                date=today + dt.timedelta(days=i + 1),
                start_time=f"{10 + (i % 8)}:00",
                max_slots=SEED_SLOTS,
                booked_slots=rng.randrange(10),
                tags=[TAGS[i % len(TAGS)], TAGS[(i + 1) % len(TAGS)]],
                status=MeetingStatus.UPCOMING,
                **_host(i),
            )
        )

    for i in range(PAST_COUNT):
        topic = TOPICS[i % len(TOPICS)]
        meetings.append(
            Meeting(
                id=f"past-{i}",
                title=f"ARCHIVE: {topic} Case Study",
                description=f"A look back at how we mitigated the major breaches of last year related to {topic}.",
                date=today - dt.timedelta(days=i + 1),
                start_time="COMPLETED",
                max_slots=SEED_SLOTS,
                booked_slots=SEED_SLOTS,
                tags=[TAGS[i % len(TAGS)], "ARCHIVE"],
                status=MeetingStatus.PAST,
                **_host(i),
            )
        )

    return meetings


def parse_tags(raw: str) -> list[str]:
    return [t.strip() for t in raw.split(",") if t.strip()]


class MeetingStore:
    """
    Sole owner and writer of the meeting list. Every mutation rewrites the
    whole ``meetings_db`` document.
    """

    def __init__(
        self,
        documents: DocumentStore,
        rng: random.Random | None = None,
        today: Callable[[], dt.date] = dt.date.today,
    ):
        self.documents = documents
        self.rng = rng or random.Random()
        self.today = today
        self._meetings: list[Meeting] = []
        # Sync routes run on the worker threadpool
        self._lock = threading.Lock()

    def initialize(self) -> list[Meeting]:
        with self._lock:
            raw = self.documents.load(MEETINGS_KEY)
            if raw is not None:
                try:
                    self._meetings = [Meeting.model_validate(item) for item in raw]
                    LOGGER.info("Restored %d meetings from storage.", len(self._meetings))
                    return self.all()
                except (ValidationError, TypeError) as e:
                    LOGGER.warning("Stored meetings are unreadable (%s). Reseeding.", e)

            self._meetings = generate_seed_meetings(self.today(), self.rng)
            LOGGER.info("Seeded %d mock meetings.", len(self._meetings))
            self._persist()
            return self.all()

    def all(self) -> list[Meeting]:
        return list(self._meetings)

    def get(self, meeting_id: str) -> Meeting | None:
        return next((m for m in self._meetings if m.id == meeting_id), None)

    def add(self, meeting: Meeting) -> None:
        with self._lock:
            self._meetings = [meeting] + self._meetings
            self._persist()

    def book_slot(self, meeting_id: str) -> None:
        with self._lock:
            meeting = self.get(meeting_id)
            if meeting is not None and meeting.booked_slots < meeting.max_slots:
                booked = meeting.model_copy(update={"booked_slots": meeting.booked_slots + 1})
                self._meetings = [booked if m.id == meeting_id else m for m in self._meetings]
            self._persist()

    def create(self, body: MeetingCreate, host: User, now: dt.datetime) -> Meeting:
        """
        Hosts a new session. The host occupies the first slot.
        """
        if not body.title.strip():
            raise ValidationFailure("A session title is required.")
        validate_schedule(body.date, body.start_time, now)

        meeting = Meeting(
            title=body.title.strip(),
            description=body.description,
            host=host.real_name,
            host_id=host.id,
            date=body.date,
            start_time=body.start_time.strip(),
            max_slots=body.max_slots,
            booked_slots=1,
            tags=parse_tags(body.tags),
            status=MeetingStatus.UPCOMING,
        )
        self.add(meeting)
        LOGGER.info("Session %s created by %s.", meeting.id, host.username)
        return meeting

    def _persist(self) -> None:
        self.documents.save(
            MEETINGS_KEY, [m.model_dump(mode="json") for m in self._meetings]
        )
