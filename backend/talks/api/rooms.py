from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Response

from talks.api.deps import get_services
from talks.app_state import Services
from talks.models import ContentSelect, MessageCreate, MessagePosted, RoomState
from talks.room import SessionRoom

router = APIRouter()


def _room(mid: str, services: Services) -> SessionRoom:
    return services.rooms.get(mid, services.session.current())


@router.post("/rooms/{mid}/join", response_model=RoomState)
def join_room(mid: str, services: Services = Depends(get_services)):
    mtg = services.meetings.get(mid)
    if not mtg:
        raise HTTPException(status_code=404, detail="Meeting not found")
    return services.rooms.join(mtg, services.session.current()).state()


@router.get("/rooms/{mid}", response_model=RoomState)
def room_state(mid: str, services: Services = Depends(get_services)):
    return _room(mid, services).state()


@router.post("/rooms/{mid}/content", response_model=RoomState)
def select_content(mid: str, body: ContentSelect, services: Services = Depends(get_services)):
    room = _room(mid, services)
    room.select(body.content)
    return room.state()


@router.post("/rooms/{mid}/screen-share", response_model=RoomState)
async def toggle_screen_share(mid: str, services: Services = Depends(get_services)):
    room = _room(mid, services)
    await room.toggle_screen_share()
    return room.state()


@router.post("/rooms/{mid}/screen-share/ended", response_model=RoomState)
def screen_share_ended(mid: str, services: Services = Depends(get_services)):
    """Called by the client when the browser stops the shared source."""
    room = _room(mid, services)
    room.screen_share_ended()
    return room.state()


@router.post("/rooms/{mid}/camera", response_model=RoomState)
async def toggle_camera(mid: str, services: Services = Depends(get_services)):
    room = _room(mid, services)
    await room.toggle_camera()
    return room.state()


@router.post("/rooms/{mid}/microphone", response_model=RoomState)
def toggle_microphone(mid: str, services: Services = Depends(get_services)):
    room = _room(mid, services)
    room.toggle_microphone()
    return room.state()


@router.post("/rooms/{mid}/messages", response_model=MessagePosted)
def send_message(
    mid: str,
    body: MessageCreate,
    bg: BackgroundTasks,
    services: Services = Depends(get_services),
):
    """
    Appends the viewer's message. An ``/ai`` command is answered in the
    background; poll the room state to see the reply.
    """
    room = _room(mid, services)
    message, request = room.post(body.text)
    if request is not None:
        bg.add_task(room.answer, request)
    return MessagePosted(message=message, ai_pending=request is not None)


@router.delete("/rooms/{mid}", status_code=204)
def leave_room(mid: str, services: Services = Depends(get_services)):
    services.rooms.leave(mid, services.session.current())
    return Response(status_code=204)
