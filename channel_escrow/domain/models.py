"""Domain data models: pure Python dataclasses."""

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from channel_escrow.errors import ValidationError


class Role(str, Enum):
    CREATOR = "creator"
    ADMIN = "admin"
    MEMBER = "member"
    NOT_PARTICIPANT = "not-participant"


class JobStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class AdminRights:
    """Administrator capability set. Field names follow the platform's flags."""

    change_info: bool = False
    post_messages: bool = False
    edit_messages: bool = False
    delete_messages: bool = False
    ban_users: bool = False
    invite_users: bool = False
    pin_messages: bool = False
    add_admins: bool = False
    anonymous: bool = False
    manage_call: bool = False
    other: bool = False
    manage_topics: bool = False

    def as_flags(self) -> Dict[str, bool]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @property
    def is_revoked(self) -> bool:
        return not any(self.as_flags().values())


REVOKED_RIGHTS = AdminRights()
REVOKED_RANK = ""


@dataclass
class Channel:
    id: int
    username: str
    title: str
    entity: Any = field(default=None, repr=False, compare=False)


@dataclass
class Identity:
    """The escrow account itself."""

    user_id: int
    username: Optional[str] = None
    entity: Any = field(default=None, repr=False, compare=False)


@dataclass
class Participant:
    user_id: int
    role: Role
    kind: str = ""  # raw record type reported by the platform
    entity: Any = field(default=None, repr=False, compare=False)


@dataclass
class TransferJob:
    """Ledger view of a job. The ledger owns it; runs only update it."""

    id: str
    listing_id: Optional[str] = None
    status: Optional[str] = None
    completed_at: Optional[datetime] = None


@dataclass
class TransferRequest:
    job_id: Optional[str] = None
    channel_username: Optional[str] = None
    buyer_username: Optional[str] = None

    def validate(self) -> None:
        if not (
            _present(self.job_id)
            and _present(self.channel_username)
            and _present(self.buyer_username)
        ):
            raise ValidationError("jobId, channelUsername, and buyerUsername are required")


def _present(value: Optional[str]) -> bool:
    return bool(value and str(value).strip())


@dataclass
class MembershipResult:
    joined: bool
    already_member: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"joined": self.joined, "alreadyMember": self.already_member}


@dataclass
class OwnershipCheck:
    is_owner: bool
    current_role: Role
    participant_type: str
    channel_id: str
    channel_title: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isOwner": self.is_owner,
            "currentRole": self.current_role.value,
            "participantType": self.participant_type,
            "channelId": self.channel_id,
            "channelTitle": self.channel_title,
        }


@dataclass
class RevocationResult:
    revoked: List[int] = field(default_factory=list)
    failed: Dict[int, str] = field(default_factory=dict)
    truncated: bool = False


@dataclass
class TransferSteps:
    joined: bool = False
    admins_removed: int = 0
    ownership_transferred: bool = False
    escrow_left: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "joined": self.joined,
            "adminsRemoved": self.admins_removed,
            "ownershipTransferred": self.ownership_transferred,
            "escrowLeft": self.escrow_left,
        }
