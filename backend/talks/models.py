import datetime as dt
import uuid
from enum import Enum
from typing import List, Optional

from sqlmodel import Field, SQLModel


def short_id() -> str:
    return uuid.uuid4().hex[:9]


# ──────────────────────────────────────────────────────────────────────────────
# Enumerations
# ──────────────────────────────────────────────────────────────────────────────
class MeetingStatus(str, Enum):
    UPCOMING = "UPCOMING"
    LIVE = "LIVE"
    PAST = "PAST"


class UserRole(str, Enum):
    NORMAL = "NORMAL"
    PREMIUM = "PREMIUM"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"


class Gender(str, Enum):
    NONE = "None"
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"
    UNDISCLOSED = "Prefer not to say"


class RoomContent(str, Enum):
    WHITEBOARD = "WHITEBOARD"
    CAMERA = "CAMERA"
    SCREEN_SHARE = "SCREEN_SHARE"


# ──────────────────────────────────────────────────────────────────────────────
# Data-models
# ──────────────────────────────────────────────────────────────────────────────
class Meeting(SQLModel):
    """
    A scheduled, live or archived research session.
    """

    id: str = Field(default_factory=short_id)
    title: str
    description: str = ""
    host: str  # display name copy, the canonical identity is host_id
    host_id: str
    date: dt.date
    start_time: str  # "HH:MM", or "NOW" / "COMPLETED"
    max_slots: int
    booked_slots: int = 0
    tags: List[str] = []
    status: MeetingStatus = MeetingStatus.UPCOMING


class Experience(SQLModel):
    id: str = Field(default_factory=short_id)
    company: str
    position: str
    duration: str
    description: str = ""


class Education(SQLModel):
    id: str = Field(default_factory=short_id)
    school: str
    degree: str
    year: str


class Certification(SQLModel):
    id: str = Field(default_factory=short_id)
    name: str
    issuer: str
    year: str


class Post(SQLModel):
    id: str = Field(default_factory=short_id)
    title: str
    content: str
    date: str


class ResearchNote(SQLModel):
    id: str = Field(default_factory=short_id)
    title: str
    filename: str
    date: str
    file_url: Optional[str] = None


class PrivacySettings(SQLModel):
    show_phone: bool = False
    show_socials: bool = True
    show_bio: bool = True
    show_expertise: bool = True
    show_experience: bool = True
    show_education: bool = True


class User(SQLModel):
    """
    A researcher ("node") profile.
    """

    id: str = Field(default_factory=short_id)
    username: str
    real_name: str
    email: str = ""
    phone_number: str = ""
    affiliation: str = ""
    job_title: Optional[str] = None
    company_name: Optional[str] = None
    gender: Gender = Gender.NONE
    role: UserRole = UserRole.NORMAL
    expertise: List[str] = []
    bio: str = ""
    avatar: Optional[str] = None
    banner: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    medium: Optional[str] = None
    reputation: int = 100
    meeting_count: int = 0
    total_meeting_duration: int = 0
    avg_rating: float = 0.0
    followers_count: int = 0
    following_count: int = 0
    experiences: List[Experience] = []
    education: List[Education] = []
    certifications: List[Certification] = []
    posts: List[Post] = []
    research_notes: List[ResearchNote] = []
    privacy_settings: PrivacySettings = Field(default_factory=PrivacySettings)


class Message(SQLModel):
    """
    A chat line inside a session room. Never persisted.
    """

    id: str = Field(default_factory=short_id)
    sender: str
    text: str
    timestamp: str


class Activity(SQLModel):
    id: str
    type: str
    description: str
    timestamp: str


class Participant(SQLModel):
    name: str
    role: str
    online: bool = True


# ──────────────────────────────────────────────────────────────────────────────
# Payloads
# ──────────────────────────────────────────────────────────────────────────────
class MeetingCreate(SQLModel):
    """
    Payload for hosting a new session.
    """

    title: str
    description: str = ""
    date: dt.date
    start_time: str = "10:00"
    max_slots: int = Field(default=12, gt=0)
    tags: str = ""  # comma-separated


class SessionDraftRequest(SQLModel):
    topic: str


class SessionDraft(SQLModel):
    """
    AI-suggested prefill for the session creation form.
    """

    title: str
    description: str
    tags: List[str] = []


class MeetingView(Meeting):
    """
    What we send back for a single meeting: the record plus its derived
    capacity fields.
    """

    is_full: bool
    can_book: bool
    capacity_percent: float


class DashboardPage(SQLModel):
    tab: MeetingStatus
    query: str
    page: int
    total_pages: int
    total: int
    first: int
    last: int
    items: List[MeetingView]


class FeaturedWindow(SQLModel):
    offset: int
    window: int
    total: int
    has_prev: bool
    has_next: bool
    items: List[MeetingView]


class LoginRequest(SQLModel):
    identifier: str  # username or email
    password: str


class SignupRequest(SQLModel):
    username: str
    real_name: str = ""
    email: str
    password: str
    phone_number: str = ""
    affiliation: str = ""


class UserCreate(SQLModel):
    """
    Payload for the admin panel's "create node" form.
    """

    username: str
    real_name: str = ""
    email: str = ""
    phone_number: str = ""
    affiliation: str = ""
    role: UserRole = UserRole.NORMAL
    bio: str = ""


class UserUpdate(SQLModel):
    """
    Partial update. Only fields that are explicitly set are applied.
    """

    username: Optional[str] = None
    real_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    affiliation: Optional[str] = None
    job_title: Optional[str] = None
    company_name: Optional[str] = None
    gender: Optional[Gender] = None
    role: Optional[UserRole] = None
    expertise: Optional[List[str]] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    banner: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    medium: Optional[str] = None
    experiences: Optional[List[Experience]] = None
    education: Optional[List[Education]] = None
    certifications: Optional[List[Certification]] = None
    posts: Optional[List[Post]] = None
    research_notes: Optional[List[ResearchNote]] = None
    privacy_settings: Optional[PrivacySettings] = None


class MessageCreate(SQLModel):
    text: str


class ContentSelect(SQLModel):
    content: RoomContent


class RoomState(SQLModel):
    """
    Snapshot of a viewer's session room.
    """

    meeting_id: str
    title: str
    is_host: bool
    content: RoomContent
    camera_on: bool
    microphone_on: bool
    controls_enabled: bool
    ai_thinking: bool
    participants: List[Participant]
    messages: List[Message]


class MessagePosted(SQLModel):
    message: Optional[Message] = None
    ai_pending: bool = False
