"""
Entity transformers: one pure function per entity kind.

Each transformer takes a raw :class:`SourceDocument` plus the ids of its
parent documents and returns a fully populated destination record. No
transformer performs I/O, so each can be tested against literal fixtures.

Defaults follow the live application: empty string for free text, empty
list for multi-valued fields, ``None`` for optional references and a fixed
sentinel for status enums. The source id is always kept as primary key.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, cast

from firestore_migrator.constants import (
    CLASS_STATUS_DEFAULT,
    ENROLLMENT_STATUS_DEFAULT,
    PAYMENT_RECORD_STATUS_DEFAULT,
    PAYMENT_STATUS_DEFAULT,
    TASK_STATUS_DEFAULT,
)
from firestore_migrator.records import (
    ChannelRecord,
    CityRecord,
    ClassRecord,
    CourseRecord,
    EnrollmentRecord,
    MessageRecord,
    NotificationRecord,
    OptionRecord,
    PaymentRecord,
    ReactionRecord,
    Record,
    ReplyRecord,
    StudentRecord,
    TaskRecord,
    UserProfileRecord,
)
from firestore_migrator.services.field_mapper import (
    CLASS_FIELDS,
    COURSE_FIELDS,
    ENROLLMENT_FIELDS,
    PAYMENT_FIELDS,
    STUDENT_FIELDS,
    map_fields,
)
from firestore_migrator.services.source import SourceDocument
from firestore_migrator.services.timestamps import (
    convert_timestamps,
    normalize_timestamp,
    now_iso,
)
from firestore_migrator.types import (
    FirestoreChannel,
    FirestoreMessage,
    FirestoreReaction,
    FirestoreTask,
    FirestoreUser,
)

ParentIds = Mapping[str, str]
Transformer = Callable[[SourceDocument, ParentIds], Record]


def _text(data: Mapping[str, Any], key: str) -> str:
    return data.get(key) or ""


def _list(data: Mapping[str, Any], key: str) -> list[Any]:
    return list(data.get(key) or [])


def _ref(data: Mapping[str, Any], key: str) -> Any:
    return data.get(key) or None


def _ts(data: Mapping[str, Any], key: str) -> Any:
    return normalize_timestamp(data.get(key))


def _crm_timestamps(data: Mapping[str, Any]) -> tuple[Any, Any]:
    """created_at/updated_at for CRM collections, defaulting to now."""
    now = now_iso()
    created_at = normalize_timestamp(data.get("created_at")) or now
    updated_at = normalize_timestamp(data.get("updated_at")) or now
    return created_at, updated_at


# ---------------------------------------------------------------------------
# Users and messaging
# ---------------------------------------------------------------------------


def transform_user(doc: SourceDocument, parents: ParentIds) -> UserProfileRecord:
    data = cast(FirestoreUser, doc.data)
    return UserProfileRecord(
        user_id=doc.id,
        display_name=_text(data, "displayName"),
        email=_text(data, "email"),
        roles=_list(data, "roles"),
        is_onboarding_complete=bool(data.get("isOnboardingComplete") or False),
        created_at=_ts(data, "createdAt"),
        updated_at=_ts(data, "updatedAt"),
    )


def transform_channel(doc: SourceDocument, parents: ParentIds) -> ChannelRecord:
    data = cast(FirestoreChannel, doc.data)
    return ChannelRecord(
        id=doc.id,
        name=_text(data, "name"),
        description=_text(data, "description"),
        members=_list(data, "members"),
        admins=_list(data, "admins"),
        created_by=_ref(data, "createdBy"),
        created_at=_ts(data, "createdAt"),
        updated_at=_ts(data, "updatedAt"),
    )


def transform_message(doc: SourceDocument, parents: ParentIds) -> MessageRecord:
    data = cast(FirestoreMessage, doc.data)
    return MessageRecord(
        id=doc.id,
        channel_id=parents["channel"],
        user_id=_ref(data, "userId"),
        content=_text(data, "content"),
        created_at=_ts(data, "createdAt"),
        updated_at=_ts(data, "updatedAt"),
    )


def transform_reply(doc: SourceDocument, parents: ParentIds) -> ReplyRecord:
    data = cast(FirestoreMessage, doc.data)
    return ReplyRecord(
        id=doc.id,
        message_id=parents["message"],
        user_id=_ref(data, "userId"),
        content=_text(data, "content"),
        created_at=_ts(data, "createdAt"),
        updated_at=_ts(data, "updatedAt"),
    )


def transform_reaction(doc: SourceDocument, parents: ParentIds) -> ReactionRecord:
    data = cast(FirestoreReaction, doc.data)
    return ReactionRecord(
        id=doc.id,
        message_id=_ref(data, "messageId"),
        user_id=_ref(data, "userId"),
        reaction_type=_text(data, "type"),
        created_at=_ts(data, "createdAt"),
    )


def transform_task(doc: SourceDocument, parents: ParentIds) -> TaskRecord:
    data = cast(FirestoreTask, doc.data)
    return TaskRecord(
        id=doc.id,
        channel_id=parents["channel"],
        user_id=_ref(data, "userId"),
        title=_text(data, "title"),
        description=_text(data, "description"),
        status=data.get("status") or TASK_STATUS_DEFAULT,
        assigned_to=_list(data, "assignedTo"),
        due_date=_ts(data, "dueDate"),
        created_at=_ts(data, "createdAt"),
        updated_at=_ts(data, "updatedAt"),
    )


def transform_notification(
    doc: SourceDocument, parents: ParentIds
) -> NotificationRecord:
    data = doc.data
    return NotificationRecord(
        id=doc.id,
        user_id=_ref(data, "userId"),
        type=_text(data, "type"),
        content=_text(data, "content"),
        is_read=bool(data.get("isRead") or False),
        related_id=_ref(data, "relatedId"),
        created_at=_ts(data, "createdAt"),
    )


# ---------------------------------------------------------------------------
# CRM
# ---------------------------------------------------------------------------


def transform_student(doc: SourceDocument, parents: ParentIds) -> StudentRecord:
    data = map_fields(doc.data, STUDENT_FIELDS)
    created_at, updated_at = _crm_timestamps(data)
    return StudentRecord(
        id=doc.id,
        name=_text(data, "name"),
        email=_text(data, "email"),
        phone=_text(data, "phone"),
        location=_text(data, "location"),
        city=_text(data, "city"),
        funnel_step=_text(data, "funnel_step"),
        interest=_text(data, "interest"),
        platform=_text(data, "platform"),
        courses=_list(data, "courses"),
        notes=_text(data, "notes"),
        avatar=_text(data, "avatar"),
        avatar_color=_text(data, "avatar_color"),
        created_at=created_at,
        updated_at=updated_at,
        created_by=_ref(data, "created_by"),
    )


def transform_class(doc: SourceDocument, parents: ParentIds) -> ClassRecord:
    data = map_fields(doc.data, CLASS_FIELDS)
    created_at, updated_at = _crm_timestamps(data)
    return ClassRecord(
        id=doc.id,
        name=_text(data, "name"),
        description=_text(data, "description"),
        level=_text(data, "level"),
        class_type=_text(data, "class_type"),
        teachers=_list(data, "teachers"),
        status=data.get("status") or CLASS_STATUS_DEFAULT,
        channel_id=_ref(data, "channel_id"),
        created_at=created_at,
        updated_at=updated_at,
        created_by=_ref(data, "created_by"),
    )


def transform_course(doc: SourceDocument, parents: ParentIds) -> CourseRecord:
    data = map_fields(doc.data, COURSE_FIELDS)
    created_at, updated_at = _crm_timestamps(data)
    return CourseRecord(
        id=doc.id,
        name=_text(data, "name"),
        description=_text(data, "description"),
        level=_text(data, "level"),
        course_type=_text(data, "course_type"),
        teachers=_list(data, "teachers"),
        status=data.get("status") or CLASS_STATUS_DEFAULT,
        class_id=_ref(data, "class_id"),
        channel_id=_ref(data, "channel_id"),
        created_at=created_at,
        updated_at=updated_at,
        created_by=_ref(data, "created_by"),
    )


def transform_enrollment(doc: SourceDocument, parents: ParentIds) -> EnrollmentRecord:
    data = map_fields(doc.data, ENROLLMENT_FIELDS)
    created_at, updated_at = _crm_timestamps(data)
    # Falls back to the *source* createdAt, not the defaulted created_at
    enrollment_date = normalize_timestamp(
        data.get("enrollment_date")
    ) or normalize_timestamp(data.get("created_at"))
    return EnrollmentRecord(
        id=doc.id,
        student_id=_ref(data, "student_id"),
        course_id=_ref(data, "course_id"),
        class_id=_ref(data, "class_id"),
        status=data.get("status") or ENROLLMENT_STATUS_DEFAULT,
        payment_status=data.get("payment_status") or PAYMENT_STATUS_DEFAULT,
        enrollment_date=enrollment_date,
        created_at=created_at,
        updated_at=updated_at,
        created_by=_ref(data, "created_by"),
    )


def transform_payment(doc: SourceDocument, parents: ParentIds) -> PaymentRecord:
    data = map_fields(convert_timestamps(doc.data), PAYMENT_FIELDS)
    created_at, updated_at = _crm_timestamps(data)
    return PaymentRecord(
        id=doc.id,
        student_id=_ref(data, "student_id"),
        course_id=_ref(data, "course_id"),
        enrollment_id=_ref(data, "enrollment_id"),
        amount=data.get("amount"),
        currency=_text(data, "currency"),
        payment_method=_text(data, "payment_method"),
        payment_date=_ref(data, "payment_date"),
        transaction_id=_ref(data, "transaction_id"),
        status=data.get("status") or PAYMENT_RECORD_STATUS_DEFAULT,
        notes=_text(data, "notes"),
        created_at=created_at,
        updated_at=updated_at,
        created_by=_ref(data, "created_by"),
    )


# ---------------------------------------------------------------------------
# Option collections
# ---------------------------------------------------------------------------


def transform_option(doc: SourceDocument, parents: ParentIds) -> OptionRecord:
    return OptionRecord(id=doc.id, value=_text(doc.data, "value"))


def transform_city(doc: SourceDocument, parents: ParentIds) -> CityRecord:
    return CityRecord(
        id=doc.id,
        value=_text(doc.data, "value"),
        country_id=_ref(doc.data, "countryId"),
    )

