"""The single active identity of a running client.

Login here is a lookup, not authentication: apart from the configured
default admin credentials no password is checked.
"""

import logging
import re
import threading

from pydantic import ValidationError

from talks.config import settings
from talks.db import SESSION_KEY, DocumentStore
from talks.directory import UserDirectory
from talks.errors import NotFound, PermissionDenied, ValidationFailure
from talks.models import SignupRequest, User, UserRole, UserUpdate

LOGGER = logging.getLogger("talks.session")

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8


def validate_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email))


def validate_password_strength(password: str) -> bool:
    return len(password) >= MIN_PASSWORD_LENGTH


class SessionState:
    def __init__(self, documents: DocumentStore, directory: UserDirectory):
        self.documents = documents
        self.directory = directory
        self._user: User | None = None
        self._lock = threading.Lock()
        directory.subscribe(self._on_user_changed)

    def restore(self) -> User | None:
        raw = self.documents.load(SESSION_KEY)
        if raw is None:
            return None
        try:
            user = User.model_validate(raw)
        except ValidationError:
            LOGGER.warning("Stored session is unreadable, starting logged out.")
            self.documents.delete(SESSION_KEY)
            return None
        # Prefer the directory's record, it may have been edited since
        self._user = self.directory.get(user.id) or user
        return self._user

    def current(self) -> User | None:
        return self._user

    def require(self) -> User:
        user = self._user
        if user is None:
            raise PermissionDenied("Login required")
        return user

    def require_admin(self) -> User:
        user = self.require()
        if user.role != UserRole.ADMIN:
            raise PermissionDenied("Admin clearance required")
        return user

    def login(self, identifier: str, password: str) -> User:
        if identifier == settings.admin_username and password == settings.admin_password:
            user = self.directory.find_by_username(settings.admin_username)
        else:
            user = self.directory.find_by_identifier(identifier)
        if not user:
            raise NotFound("Invalid credentials or node not found.")
        self._start(user)
        return user

    def register(self, body: SignupRequest) -> User:
        if not body.username.strip():
            raise ValidationFailure("Unique Username is required.")
        if not validate_email(body.email):
            raise ValidationFailure("Invalid email format.")
        if not validate_password_strength(body.password):
            raise ValidationFailure("Password must be 8+ chars with uppercase, numbers, and symbols.")

        user = self.directory.add(
            User(
                username=body.username.strip(),
                real_name=body.real_name or "Anonymous Researcher",
                email=body.email,
                phone_number=body.phone_number,
                affiliation=body.affiliation or "Independent",
            )
        )
        self._start(user)
        return user

    def logout(self) -> None:
        with self._lock:
            if self._user is not None:
                LOGGER.info("%s logged out", self._user.username)
            self._user = None
            self.documents.delete(SESSION_KEY)

    def update_profile(self, updates: UserUpdate) -> User:
        """
        Edits the current user's own profile. The role is not part of the
        profile and is silently left as is.
        """
        user = self.require()
        updates = updates.model_copy()
        updates.role = None
        # The directory listener refreshes the session
        return self.directory.update_user(user.id, updates)

    def _on_user_changed(self, user_id: str, user: User | None) -> None:
        current = self._user
        if current is None or current.id != user_id:
            return
        if user is None:
            LOGGER.info("Account %s was deleted, ending its session", current.username)
            self.logout()
        else:
            self._start(user)

    def _start(self, user: User) -> None:
        with self._lock:
            self._user = user
            self.documents.save(SESSION_KEY, user.model_dump(mode="json"))
        LOGGER.info("Session started for %s", user.username)
