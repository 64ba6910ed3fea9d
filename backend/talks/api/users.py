from fastapi import APIRouter, Depends, HTTPException

from talks.api.deps import get_services
from talks.app_state import Services
from talks.lifecycle import to_view
from talks.models import MeetingView, User

router = APIRouter()


@router.get("/users/search", response_model=list[User])
def search_users(q: str = "", services: Services = Depends(get_services)):
    return services.users.search(q)


@router.get("/users/{username}", response_model=User)
def public_profile(username: str, services: Services = Depends(get_services)):
    user = services.users.find_by_username(username)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.get("/users/{username}/meetings", response_model=list[MeetingView])
def hosted_meetings(username: str, services: Services = Depends(get_services)):
    """Sessions hosted by a user, matched on host id rather than display name."""
    user = services.users.find_by_username(username)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return [to_view(m) for m in services.meetings.all() if m.host_id == user.id]
