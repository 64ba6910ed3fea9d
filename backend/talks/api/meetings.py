import datetime as dt

from fastapi import APIRouter, Depends, HTTPException

from talks.api.deps import get_services
from talks.app_state import Services
from talks.dashboard import DashboardView
from talks.lifecycle import to_view
from talks.models import (
    DashboardPage,
    FeaturedWindow,
    MeetingCreate,
    MeetingStatus,
    MeetingView,
    SessionDraft,
    SessionDraftRequest,
)

router = APIRouter()


@router.get("/meetings", response_model=DashboardPage)
def explorer(
    tab: MeetingStatus = MeetingStatus.UPCOMING,
    q: str = "",
    page: int = 0,
    services: Services = Depends(get_services),
):
    """
    One page of the session explorer. A page outside the filtered range
    leaves the explorer on its first page.
    """
    view = DashboardView(services.meetings.all)
    view.set_tab(tab)
    view.set_query(q)
    view.go_to_page(page)
    return view.explorer_page()


@router.get("/meetings/featured", response_model=FeaturedWindow)
def featured(offset: int = 0, services: Services = Depends(get_services)):
    view = DashboardView(services.meetings.all)
    view.move_slider_to(offset)
    return view.featured_window()


@router.post("/meetings/draft", response_model=SessionDraft)
async def draft_session(body: SessionDraftRequest, services: Services = Depends(get_services)):
    services.session.require()
    if not body.topic.strip():
        raise HTTPException(status_code=400, detail="A topic is required.")
    return await services.advisor.draft_session(body.topic)


@router.get("/meetings/{mid}", response_model=MeetingView)
def get_meeting(mid: str, services: Services = Depends(get_services)):
    mtg = services.meetings.get(mid)
    if not mtg:
        raise HTTPException(status_code=404, detail="Meeting not found")
    return to_view(mtg)


@router.post("/meetings", response_model=MeetingView, status_code=201)
def create_meeting(body: MeetingCreate, services: Services = Depends(get_services)):
    host = services.session.require()
    mtg = services.meetings.create(body, host, now=dt.datetime.now())
    return to_view(mtg)


@router.post("/meetings/{mid}/book", response_model=MeetingView)
def book_slot(mid: str, services: Services = Depends(get_services)):
    """
    Books one slot. Booking a full or non-upcoming meeting is not an error,
    the meeting simply comes back unchanged with ``can_book`` false.
    """
    services.session.require()
    mtg = services.meetings.get(mid)
    if not mtg:
        raise HTTPException(status_code=404, detail="Meeting not found")
    if mtg.status == MeetingStatus.UPCOMING:
        services.meetings.book_slot(mid)
    return to_view(services.meetings.get(mid))
