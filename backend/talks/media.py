"""Media capture collaborator.

Capture itself happens in the viewer's browser. The server only hands out
handles that track which sources a room believes are live, so that the room
can release them and react when the browser reports the capture has ended.
"""

import logging
import uuid
from typing import Protocol

from talks.errors import CollaboratorError

LOGGER = logging.getLogger("talks.media")


class MediaHandle:
    def __init__(self, kind: str):
        self.id = uuid.uuid4().hex
        self.kind = kind
        self.live = True

    def release(self) -> None:
        if self.live:
            self.live = False
            LOGGER.info("Released %s source %s", self.kind, self.id)


class MediaDevices(Protocol):
    async def open_camera(self) -> MediaHandle: ...

    async def open_screen(self) -> MediaHandle: ...


class BrowserMediaDevices:
    """
    Issues handles for sources captured client-side. ``allow_*`` mirror the
    browser's permission state; a denied permission fails the request.
    """

    def __init__(self, allow_camera: bool = True, allow_screen: bool = True):
        self.allow_camera = allow_camera
        self.allow_screen = allow_screen

    async def open_camera(self) -> MediaHandle:
        if not self.allow_camera:
            raise CollaboratorError("Could not access camera")
        return MediaHandle("camera")

    async def open_screen(self) -> MediaHandle:
        if not self.allow_screen:
            raise CollaboratorError("Screen share permission denied")
        return MediaHandle("screen")
