"""
Typed shapes for tenant credentials and the Trello entities passed through the bridge.

Entities are TypedDicts because the client hands back the decoded JSON as-is;
the declarations document the fields the formatters rely on.
"""
from typing import Any, Dict, List, Literal, Optional, TypedDict, Union

from pydantic import BaseModel, ConfigDict
from pydantic_core import core_schema

# --- Closed enumerations ---

StatusFilter = Literal["all", "open", "closed"]
ResponseFormat = Literal["json", "markdown"]
PermissionLevel = Literal["private", "org", "public"]
BoardMemberType = Literal["admin", "normal", "observer"]
VotingPref = Literal["disabled", "members", "observers", "org", "public"]
InvitationsPref = Literal["members", "admins"]
CardAging = Literal["regular", "pirate"]
Color = Literal["yellow", "purple", "blue", "red", "green", "orange", "black", "sky", "pink", "lime"]
CustomFieldType = Literal["checkbox", "date", "list", "number", "text"]
CheckItemState = Literal["complete", "incomplete"]
CoverSize = Literal["normal", "full"]
SearchModelType = Literal["actions", "boards", "cards", "members", "organizations"]
Position = Union[Literal["top", "bottom"], int, float]


class _Unset:
    """Marks an argument the caller did not supply, as opposed to an explicit None."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "UNSET"

    def __bool__(self):
        return False

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type, handler):
        # Tool schemas show an omitted argument as a null default
        return core_schema.is_instance_schema(
            cls,
            serialization=core_schema.plain_serializer_function_ser_schema(lambda _: None),
        )


UNSET: Any = _Unset()


class TenantCredentials(BaseModel):
    """One tenant's Trello API key and token, valid for a single inbound request."""

    model_config = ConfigDict(frozen=True)

    api_key: str
    token: str

    def __repr__(self):
        # Keep secrets out of logs and tracebacks
        return f"TenantCredentials(api_key='{self.api_key[:4]}...', token='***')"

    __str__ = __repr__


# --- Entities ---

class Membership(TypedDict, total=False):
    id: str
    idMember: str
    memberType: BoardMemberType
    unconfirmed: bool
    deactivated: bool


class Board(TypedDict, total=False):
    id: str
    name: str
    desc: str
    closed: bool
    idOrganization: Optional[str]
    pinned: bool
    url: str
    shortUrl: str
    shortLink: str
    prefs: Dict[str, Any]
    starred: bool
    memberships: List[Membership]
    dateLastActivity: Optional[str]


class TrelloList(TypedDict, total=False):
    id: str
    name: str
    closed: bool
    idBoard: str
    pos: float
    subscribed: bool
    softLimit: Optional[int]


class Label(TypedDict, total=False):
    id: str
    idBoard: str
    name: str
    color: Optional[Color]


class CardCover(TypedDict, total=False):
    idAttachment: Optional[str]
    color: Optional[Color]
    size: CoverSize
    brightness: Literal["light", "dark"]


class Card(TypedDict, total=False):
    id: str
    name: str
    desc: str
    closed: bool
    idBoard: str
    idList: str
    idShort: int
    pos: float
    due: Optional[str]
    dueComplete: bool
    start: Optional[str]
    dateLastActivity: str
    idMembers: List[str]
    idLabels: List[str]
    labels: List[Label]
    idChecklists: List[str]
    shortUrl: str
    shortLink: str
    url: str
    cover: CardCover


class Member(TypedDict, total=False):
    id: str
    username: str
    fullName: str
    initials: str
    avatarUrl: Optional[str]
    memberType: BoardMemberType
    url: str
    idBoards: List[str]
    idOrganizations: List[str]


class Organization(TypedDict, total=False):
    id: str
    name: str
    displayName: str
    desc: str
    url: str
    website: Optional[str]
    idBoards: List[str]
    prefs: Dict[str, Any]


class CheckItem(TypedDict, total=False):
    id: str
    name: str
    pos: float
    state: CheckItemState
    idChecklist: str
    due: Optional[str]
    idMember: Optional[str]


class Checklist(TypedDict, total=False):
    id: str
    name: str
    idBoard: str
    idCard: str
    pos: float
    checkItems: List[CheckItem]


class CustomFieldOption(TypedDict, total=False):
    id: str
    idCustomField: str
    value: Dict[str, str]
    color: Optional[Color]
    pos: float


class CustomField(TypedDict, total=False):
    id: str
    idModel: str
    modelType: Literal["board"]
    name: str
    pos: float
    display: Dict[str, bool]
    type: CustomFieldType
    options: List[CustomFieldOption]


class CustomFieldItem(TypedDict, total=False):
    id: str
    idCustomField: str
    idModel: str
    modelType: Literal["card"]
    idValue: str
    value: Dict[str, str]


class Webhook(TypedDict, total=False):
    id: str
    description: str
    idModel: str
    callbackURL: str
    active: bool
    consecutiveFailures: int
    firstConsecutiveFailDate: Optional[str]


class Action(TypedDict, total=False):
    id: str
    idMemberCreator: str
    type: str
    date: str
    data: Dict[str, Any]
    memberCreator: Member


class Attachment(TypedDict, total=False):
    id: str
    bytes: Optional[int]
    date: str
    idMember: str
    isUpload: bool
    mimeType: str
    name: str
    pos: float
    url: str
    fileName: str


# Comments come back as commentCard actions
Comment = Action


class SearchResult(TypedDict, total=False):
    options: Dict[str, Any]
    boards: List[Board]
    cards: List[Card]
    members: List[Member]
    organizations: List[Organization]
    actions: List[Action]
