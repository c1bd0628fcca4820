"""Destination record shapes, one dataclass per Supabase table.

Every column is a named field with its documented default, so a record
always serializes to a complete row: no column is ever omitted.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar

from firestore_migrator.constants import (
    CLASS_STATUS_DEFAULT,
    ENROLLMENT_STATUS_DEFAULT,
    PAYMENT_RECORD_STATUS_DEFAULT,
    PAYMENT_STATUS_DEFAULT,
    TASK_STATUS_DEFAULT,
)


@dataclass
class Record:
    """Base class for destination records."""

    # Column holding the preserved source id
    key_column: ClassVar[str] = "id"

    def to_row(self) -> dict[str, Any]:
        return asdict(self)

    @property
    def record_id(self) -> str:
        return str(getattr(self, self.key_column))


# ---------------------------------------------------------------------------
# Users and messaging
# ---------------------------------------------------------------------------


@dataclass
class UserProfileRecord(Record):
    key_column: ClassVar[str] = "user_id"

    user_id: str
    display_name: str = ""
    email: str = ""
    roles: list[str] = field(default_factory=list)
    is_onboarding_complete: bool = False
    created_at: str | None = None
    updated_at: str | None = None


@dataclass
class ChannelRecord(Record):
    id: str
    name: str = ""
    description: str = ""
    members: list[str] = field(default_factory=list)
    admins: list[str] = field(default_factory=list)
    created_by: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass
class MessageRecord(Record):
    id: str
    channel_id: str
    user_id: str | None = None
    content: str = ""
    created_at: str | None = None
    updated_at: str | None = None


@dataclass
class ReplyRecord(Record):
    id: str
    message_id: str
    user_id: str | None = None
    content: str = ""
    created_at: str | None = None
    updated_at: str | None = None


@dataclass
class ReactionRecord(Record):
    id: str
    message_id: str | None = None
    user_id: str | None = None
    reaction_type: str = ""
    created_at: str | None = None


@dataclass
class TaskRecord(Record):
    id: str
    channel_id: str
    user_id: str | None = None
    title: str = ""
    description: str = ""
    status: str = TASK_STATUS_DEFAULT
    assigned_to: list[str] = field(default_factory=list)
    due_date: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


@dataclass
class NotificationRecord(Record):
    id: str
    user_id: str | None = None
    type: str = ""
    content: str = ""
    is_read: bool = False
    related_id: str | None = None
    created_at: str | None = None


# ---------------------------------------------------------------------------
# CRM
# ---------------------------------------------------------------------------


@dataclass
class StudentRecord(Record):
    id: str
    name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    city: str = ""
    funnel_step: str = ""
    interest: str = ""
    platform: str = ""
    courses: list[str] = field(default_factory=list)
    notes: str = ""
    avatar: str = ""
    avatar_color: str = ""
    created_at: str | None = None
    updated_at: str | None = None
    created_by: str | None = None


@dataclass
class ClassRecord(Record):
    id: str
    name: str = ""
    description: str = ""
    level: str = ""
    class_type: str = ""
    teachers: list[str] = field(default_factory=list)
    status: str = CLASS_STATUS_DEFAULT
    channel_id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    created_by: str | None = None


@dataclass
class CourseRecord(Record):
    id: str
    name: str = ""
    description: str = ""
    level: str = ""
    course_type: str = ""
    teachers: list[str] = field(default_factory=list)
    status: str = CLASS_STATUS_DEFAULT
    class_id: str | None = None
    channel_id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    created_by: str | None = None


@dataclass
class EnrollmentRecord(Record):
    id: str
    student_id: str | None = None
    course_id: str | None = None
    class_id: str | None = None
    status: str = ENROLLMENT_STATUS_DEFAULT
    payment_status: str = PAYMENT_STATUS_DEFAULT
    enrollment_date: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    created_by: str | None = None


@dataclass
class PaymentRecord(Record):
    id: str
    student_id: str | None = None
    course_id: str | None = None
    enrollment_id: str | None = None
    amount: float | None = None
    currency: str = ""
    payment_method: str = ""
    payment_date: str | None = None
    transaction_id: str | None = None
    status: str = PAYMENT_RECORD_STATUS_DEFAULT
    notes: str = ""
    created_at: str | None = None
    updated_at: str | None = None
    created_by: str | None = None


@dataclass
class OptionRecord(Record):
    """Row of a lookup table: an id and a single display value."""

    id: str
    value: str = ""


@dataclass
class CityRecord(OptionRecord):
    country_id: str | None = None
