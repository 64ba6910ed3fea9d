import logging
import threading
from typing import Callable

from pydantic import ValidationError

from talks.db import USERS_KEY, DocumentStore
from talks.errors import NotFound, ProtectedRecord, ValidationFailure
from talks.models import (
    Activity,
    Certification,
    Education,
    Experience,
    Gender,
    Post,
    PrivacySettings,
    ResearchNote,
    User,
    UserCreate,
    UserRole,
    UserUpdate,
)

LOGGER = logging.getLogger("talks.directory")


def seed_users() -> list[User]:
    return [
        User(
            id="admin-001",
            username="admin",
            real_name="System Administrator",
            email="admin@z3r0day.io",
            phone_number="+1 000-0000",
            affiliation="Core Command",
            role=UserRole.ADMIN,
            expertise=["System Management", "Access Control"],
            bio="Root level access. System-wide management node.",
            avatar="https://api.dicebear.com/7.x/avataaars/svg?seed=Admin",
            reputation=9999,
            avg_rating=5.0,
            privacy_settings=PrivacySettings(show_phone=True),
        ),
        User(
            id="u1",
            username="GhostRoot",
            real_name="Alex Rivers",
            email="ghost@z3r0day.io",
            phone_number="+1 555-0101",
            affiliation="ZeroDay Labs",
            gender=Gender.MALE,
            role=UserRole.PREMIUM,
            expertise=["Web Security", "Binary Analysis"],
            bio="Core developer and security enthusiast. Specialized in kernel-level exploitation and sandbox escapes.",
            avatar="https://api.dicebear.com/7.x/avataaars/svg?seed=Ghost",
            reputation=1250,
            meeting_count=24,
            total_meeting_duration=1440,
            avg_rating=4.9,
            followers_count=156,
            following_count=42,
            experiences=[
                Experience(
                    id="exp1",
                    company="Palo Alto Networks",
                    position="Security Researcher",
                    duration="2020 - Present",
                    description="Working on zero-day research.",
                )
            ],
            education=[Education(id="edu1", school="MIT", degree="Computer Science", year="2019")],
            certifications=[Certification(id="cert1", name="OSCP", issuer="OffSec", year="2021")],
            posts=[Post(id="p1", title="Why I love C", content="Low level is the best level.", date="2024-05-10")],
            research_notes=[
                ResearchNote(
                    id="rn1",
                    title="Buffer Overflows in 2024",
                    filename="research_overflow.pdf",
                    date="2024-05-12",
                )
            ],
        ),
    ]


ACTIVITY_LOG = [
    Activity(id="a1", type="LOGIN", description="Session initialized via remote node", timestamp="2024-05-18 09:42:00"),
    Activity(id="a2", type="MEETING_HOSTED", description='Hosted "Advanced Buffer Overflow"', timestamp="2024-05-17 14:00:00"),
    Activity(id="a3", type="PROFILE_UPDATE", description="Bio encryption keys updated", timestamp="2024-05-16 11:20:00"),
    Activity(id="a4", type="FOLLOW", description="Started following @CipherSmith", timestamp="2024-05-15 23:10:00"),
]


UserListener = Callable[[str, User | None], None]


class UserDirectory:
    """
    Owns the user list. Role protection is enforced here so it holds no
    matter which surface asks for the change.

    Listeners are called with ``(user_id, user)`` after a user is updated,
    and with ``(user_id, None)`` after one is deleted.
    """

    def __init__(self, documents: DocumentStore):
        self.documents = documents
        self._users: list[User] = []
        # Sync routes run on the worker threadpool
        self._lock = threading.Lock()
        self._listeners: list[UserListener] = []

    def initialize(self) -> list[User]:
        with self._lock:
            raw = self.documents.load(USERS_KEY)
            if raw is not None:
                try:
                    self._users = [User.model_validate(item) for item in raw]
                    return list(self._users)
                except (ValidationError, TypeError) as e:
                    LOGGER.warning("Stored users are unreadable (%s). Reseeding.", e)
            self._users = seed_users()
            self._persist()
            return list(self._users)

    def subscribe(self, listener: UserListener) -> None:
        self._listeners.append(listener)

    # ── lookups ──────────────────────────────────────────────────────────────
    def all(self) -> list[User]:
        return list(self._users)

    def get(self, user_id: str) -> User | None:
        return next((u for u in self._users if u.id == user_id), None)

    def find_by_username(self, username: str) -> User | None:
        return next((u for u in self._users if u.username == username), None)

    def find_by_identifier(self, identifier: str) -> User | None:
        return next(
            (u for u in self._users if identifier in (u.username, u.email)), None
        )

    def search(self, query: str) -> list[User]:
        needle = query.strip().lower()
        if not needle:
            return []
        return [
            u
            for u in self._users
            if needle in u.username.lower() or needle in u.real_name.lower()
        ]

    def get_activities(self, user_id: str) -> list[Activity]:
        # Illustrative entries only, no real action history is recorded
        return list(ACTIVITY_LOG)

    # ── mutations ────────────────────────────────────────────────────────────
    def add(self, user: User) -> User:
        if not user.username.strip():
            raise ValidationFailure("Unique Username is required.")
        with self._lock:
            if self.find_by_username(user.username):
                raise ValidationFailure(f"Username {user.username!r} is already taken.")
            self._users = self._users + [user]
            self._persist()
        LOGGER.info("Registered user %s (%s)", user.username, user.role.value)
        return user

    def create_user(self, body: UserCreate) -> User:
        return self.add(User(**body.model_dump(), privacy_settings=PrivacySettings(show_phone=True)))

    def update_user(self, user_id: str, updates: UserUpdate) -> User:
        # model_copy skips validation, so keep the parsed values instead of dumping them
        changes = {
            k: getattr(updates, k)
            for k in updates.model_fields_set
            if getattr(updates, k) is not None
        }
        if "username" in changes and not changes["username"].strip():
            raise ValidationFailure("Unique Username is required.")

        with self._lock:
            user = self.get(user_id)
            if not user:
                raise NotFound("User not found")
            if (
                "role" in changes
                and user.role == UserRole.ADMIN
                and changes["role"] != UserRole.ADMIN
            ):
                raise ProtectedRecord("Admin role protected.")
            if "username" in changes:
                other = self.find_by_username(changes["username"])
                if other and other.id != user_id:
                    raise ValidationFailure(f"Username {changes['username']!r} is already taken.")

            updated = user.model_copy(update=changes)
            self._users = [updated if u.id == user_id else u for u in self._users]
            self._persist()

        self._notify(user_id, updated)
        return updated

    def delete_user(self, user_id: str) -> None:
        with self._lock:
            user = self.get(user_id)
            if not user:
                return
            admins = [u for u in self._users if u.role == UserRole.ADMIN]
            if user.role == UserRole.ADMIN and len(admins) == 1:
                raise ProtectedRecord("Cannot delete the last admin.")
            self._users = [u for u in self._users if u.id != user_id]
            self._persist()

        LOGGER.info("Deleted user %s", user.username)
        self._notify(user_id, None)

    def _notify(self, user_id: str, user: User | None) -> None:
        for listener in self._listeners:
            listener(user_id, user)

    def _persist(self) -> None:
        self.documents.save(USERS_KEY, [u.model_dump(mode="json") for u in self._users])
