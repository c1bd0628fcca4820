"""Per-entity renaming of Firestore field names to Supabase column names."""

from __future__ import annotations

from typing import Any, Mapping

COMMON_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "createdBy": "created_by",
}

STUDENT_FIELDS = {
    **COMMON_FIELDS,
    "dateOfBirth": "date_of_birth",
    "enrollmentDate": "enrollment_date",
    "emergencyContact": "emergency_contact",
    "funnelStep": "funnel_step",
    "avatarColor": "avatar_color",
}

COURSE_FIELDS = {
    **COMMON_FIELDS,
    "courseType": "course_type",
    "classId": "class_id",
    "channelId": "channel_id",
}

CLASS_FIELDS = {
    **COMMON_FIELDS,
    "classType": "class_type",
    "startDate": "start_date",
    "endDate": "end_date",
    "courseId": "course_id",
    "channelId": "channel_id",
}

ENROLLMENT_FIELDS = {
    **COMMON_FIELDS,
    "studentId": "student_id",
    "courseId": "course_id",
    "classId": "class_id",
    "studentName": "student_name",
    "studentEmail": "student_email",
    "courseName": "course_name",
    "courseLevel": "course_level",
    "className": "class_name",
    "paymentStatus": "payment_status",
    "paymentId": "payment_id",
    "enrollmentDate": "enrollment_date",
    "startDate": "start_date",
    "endDate": "end_date",
    "completionDate": "completion_date",
}

PAYMENT_FIELDS = {
    **COMMON_FIELDS,
    "studentId": "student_id",
    "courseId": "course_id",
    "enrollmentId": "enrollment_id",
    "paymentDate": "payment_date",
    "transactionId": "transaction_id",
    "paymentMethod": "payment_method",
}


def map_fields(record: Mapping[str, Any], mapping: Mapping[str, str]) -> dict[str, Any]:
    """Rename the top-level keys of *record* found in *mapping*.

    Keys not in *mapping* are copied verbatim. Nested values are not
    visited; the input is never mutated.
    """
    return {mapping.get(key, key): value for key, value in record.items()}
