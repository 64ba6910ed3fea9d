"""Live session room: active content selector, host media controls and chat.

A room belongs to one viewer of one meeting and lives only as long as that
viewer stays in it. Its message log is the single source of truth for the
order in which lines are shown; AI replies are appended whenever they come
back, so they may land after messages sent in the meantime.
"""

import datetime as dt
import logging
import threading
from dataclasses import dataclass
from typing import Callable

from talks.advisor import Advisor
from talks.ai_config import AIConfig, AIPrompts
from talks.errors import CollaboratorError, NotFound, ValidationFailure
from talks.media import MediaDevices, MediaHandle
from talks.models import (
    Meeting,
    Message,
    Participant,
    RoomContent,
    RoomState,
    User,
    short_id,
)

LOGGER = logging.getLogger("talks.room")

SYSTEM_SENDER = "System"
SELF_SENDER = "You"
GREETING = "Secure session established. End-to-end encryption active."
MOCK_MEMBERS = ["NullPointer", "RootAccess", "CyberSentinel"]


@dataclass(frozen=True)
class AdviceRequest:
    correlation_id: str
    query: str
    generation: int


class SessionRoom:
    def __init__(
        self,
        meeting: Meeting,
        viewer: User | None,
        advisor: Advisor,
        media: MediaDevices,
        clock: Callable[[], dt.datetime] = dt.datetime.now,
    ):
        self.meeting = meeting
        self.viewer = viewer
        self.advisor = advisor
        self.media = media
        self.clock = clock

        self.content = RoomContent.WHITEBOARD
        self.microphone_on = False
        self._camera: MediaHandle | None = None
        self._screen: MediaHandle | None = None
        self._pending: set[str] = set()
        self.generation = 0
        self.messages: list[Message] = []
        self._append(SYSTEM_SENDER, GREETING)

    @property
    def is_host(self) -> bool:
        # Identity comes from host_id, never from the denormalised host name
        return self.viewer is not None and self.viewer.id == self.meeting.host_id

    @property
    def camera_on(self) -> bool:
        return self._camera is not None

    @property
    def ai_thinking(self) -> bool:
        return bool(self._pending)

    # ── content selector ─────────────────────────────────────────────────────
    def select(self, content: RoomContent) -> None:
        if content == RoomContent.SCREEN_SHARE:
            raise ValidationFailure("Screen share is started with the screen share toggle.")
        if self.content == RoomContent.SCREEN_SHARE:
            self._stop_screen()
        self.content = content

    async def toggle_screen_share(self) -> None:
        if not self.is_host:
            return

        if self.content == RoomContent.SCREEN_SHARE:
            self._stop_screen()
            self.content = RoomContent.WHITEBOARD
            return

        generation = self.generation
        try:
            handle = await self.media.open_screen()
        except CollaboratorError as e:
            LOGGER.warning("Screen share error in %s: %s", self.meeting.id, e.detail)
            return
        if generation != self.generation:
            handle.release()
            return
        self._screen = handle
        self.content = RoomContent.SCREEN_SHARE

    def screen_share_ended(self) -> None:
        """The shared source went away outside the room's control."""
        self._stop_screen()
        if self.content == RoomContent.SCREEN_SHARE:
            self.content = RoomContent.WHITEBOARD

    def _stop_screen(self) -> None:
        if self._screen is not None:
            self._screen.release()
            self._screen = None

    # ── host media controls ──────────────────────────────────────────────────
    async def toggle_camera(self) -> None:
        if not self.is_host:
            return
        if self._camera is not None:
            self._camera.release()
            self._camera = None
            return

        generation = self.generation
        try:
            handle = await self.media.open_camera()
        except CollaboratorError as e:
            LOGGER.warning("Could not access camera in %s: %s", self.meeting.id, e.detail)
            return
        if generation != self.generation:
            handle.release()
            return
        self._camera = handle

    def toggle_microphone(self) -> None:
        if self.is_host:
            self.microphone_on = not self.microphone_on

    # ── chat ─────────────────────────────────────────────────────────────────
    def post(self, text: str) -> tuple[Message | None, AdviceRequest | None]:
        """
        Appends the viewer's line right away. Returns the advice request to
        resolve when the line is an AI command.
        """
        if not text.strip():
            return None, None

        message = self._append(SELF_SENDER, text)
        prefix = AIConfig.COMMAND_PREFIX
        if not text.lower().startswith(prefix):
            return message, None
        query = text[len(prefix):]
        if not query.strip():
            return message, None

        request = AdviceRequest(
            correlation_id=short_id(),
            query=query,
            generation=self.generation,
        )
        self._pending.add(request.correlation_id)
        return message, request

    async def answer(self, request: AdviceRequest) -> Message | None:
        try:
            reply = await self.advisor.advise(request.query)
        except CollaboratorError as e:
            LOGGER.error("Dropped AI request %s: %s", request.correlation_id, e.detail)
            return None
        finally:
            self._pending.discard(request.correlation_id)

        if request.generation != self.generation:
            LOGGER.info("Discarding stale AI reply %s", request.correlation_id)
            return None
        return self._append(AIConfig.ASSISTANT_NAME, reply or AIPrompts.EMPTY_ADVICE)

    async def send(self, text: str) -> Message | None:
        message, request = self.post(text)
        if request is not None:
            await self.answer(request)
        return message

    def _append(self, sender: str, text: str) -> Message:
        message = Message(sender=sender, text=text, timestamp=self.clock().strftime("%H:%M"))
        self.messages.append(message)
        return message

    # ── lifecycle ────────────────────────────────────────────────────────────
    def close(self) -> None:
        self.generation += 1
        self._pending.clear()
        self._stop_screen()
        if self._camera is not None:
            self._camera.release()
            self._camera = None

    def participants(self) -> list[Participant]:
        return [Participant(name=self.meeting.host or "Researcher", role="Host")] + [
            Participant(name=name, role="Member") for name in MOCK_MEMBERS
        ]

    def state(self) -> RoomState:
        return RoomState(
            meeting_id=self.meeting.id,
            title=self.meeting.title,
            is_host=self.is_host,
            content=self.content,
            camera_on=self.camera_on,
            microphone_on=self.microphone_on,
            controls_enabled=self.is_host,
            ai_thinking=self.ai_thinking,
            participants=self.participants(),
            messages=list(self.messages),
        )


class RoomRegistry:
    """
    Open rooms, one per (meeting, viewer).
    """

    def __init__(self, advisor: Advisor, media: MediaDevices):
        self.advisor = advisor
        self.media = media
        self._rooms: dict[tuple[str, str], SessionRoom] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(meeting_id: str, viewer: User | None) -> tuple[str, str]:
        return meeting_id, viewer.id if viewer else "anonymous"

    def join(self, meeting: Meeting, viewer: User | None) -> SessionRoom:
        key = self._key(meeting.id, viewer)
        with self._lock:
            room = self._rooms.get(key)
            if room is None:
                room = SessionRoom(meeting, viewer, self.advisor, self.media)
                self._rooms[key] = room
                LOGGER.info("%s joined room %s", key[1], meeting.id)
        return room

    def get(self, meeting_id: str, viewer: User | None) -> SessionRoom:
        with self._lock:
            room = self._rooms.get(self._key(meeting_id, viewer))
        if room is None:
            raise NotFound("Room not joined")
        return room

    def leave(self, meeting_id: str, viewer: User | None) -> None:
        with self._lock:
            room = self._rooms.pop(self._key(meeting_id, viewer), None)
        if room is not None:
            room.close()
            LOGGER.info("Left room %s", meeting_id)
