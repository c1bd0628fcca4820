"""Unit tests for the entity transformers."""

from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from firestore_migrator.records import UserProfileRecord
from firestore_migrator.services.source import SourceDocument
from firestore_migrator.services.transformers import (
    transform_channel,
    transform_city,
    transform_class,
    transform_course,
    transform_enrollment,
    transform_message,
    transform_notification,
    transform_option,
    transform_payment,
    transform_reaction,
    transform_reply,
    transform_student,
    transform_task,
    transform_user,
)

TS = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
TS_ISO = "2024-01-02T03:04:05.000Z"


def _doc(doc_id, **data):
    return SourceDocument(id=doc_id, data=data)


# ---------------------------------------------------------------------------
# Users and messaging
# ---------------------------------------------------------------------------


class TestTransformUser:
    """Tests for transform_user()."""

    def test_full_record(self):
        record = transform_user(
            _doc(
                "u1",
                displayName="Alice",
                email="alice@example.com",
                roles=["admin"],
                isOnboardingComplete=True,
                createdAt=TS,
                updatedAt=TS,
            ),
            {},
        )
        assert record == UserProfileRecord(
            user_id="u1",
            display_name="Alice",
            email="alice@example.com",
            roles=["admin"],
            is_onboarding_complete=True,
            created_at=TS_ISO,
            updated_at=TS_ISO,
        )
        assert record.record_id == "u1"

    def test_defaults(self):
        row = transform_user(_doc("u1"), {}).to_row()
        assert row == {
            "user_id": "u1",
            "display_name": "",
            "email": "",
            "roles": [],
            "is_onboarding_complete": False,
            "created_at": None,
            "updated_at": None,
        }


class TestTransformChannel:
    """Tests for transform_channel()."""

    def test_full_record(self):
        row = transform_channel(
            _doc("c1", name="General", members=["u1"], createdBy="u1", createdAt=TS),
            {},
        ).to_row()
        assert row["id"] == "c1"
        assert row["name"] == "General"
        assert row["members"] == ["u1"]
        assert row["created_by"] == "u1"
        assert row["created_at"] == TS_ISO

    def test_defaults(self):
        row = transform_channel(_doc("c1"), {}).to_row()
        assert row == {
            "id": "c1",
            "name": "",
            "description": "",
            "members": [],
            "admins": [],
            "created_by": None,
            "created_at": None,
            "updated_at": None,
        }


class TestTransformMessageAndReply:
    """Tests for transform_message() and transform_reply()."""

    def test_message_takes_channel_from_parent(self):
        row = transform_message(
            _doc("m1", userId="u1", content="hi", createdAt=TS), {"channel": "c1"}
        ).to_row()
        assert row == {
            "id": "m1",
            "channel_id": "c1",
            "user_id": "u1",
            "content": "hi",
            "created_at": TS_ISO,
            "updated_at": None,
        }

    def test_reply_takes_message_from_parent(self):
        row = transform_reply(
            _doc("r1", userId="u1", content="hello back"),
            {"channel": "c1", "message": "m1"},
        ).to_row()
        assert row["id"] == "r1"
        assert row["message_id"] == "m1"
        assert row["content"] == "hello back"

    def test_message_without_parent_raises(self):
        with pytest.raises(KeyError):
            transform_message(_doc("m1"), {})

    def test_message_defaults(self):
        row = transform_message(_doc("m1"), {"channel": "c1"}).to_row()
        assert row["user_id"] is None
        assert row["content"] == ""


class TestTransformReactionTaskNotification:
    """Tests for the remaining messaging transformers."""

    def test_reaction(self):
        row = transform_reaction(
            _doc("re1", messageId="m1", userId="u2", type="thumbs_up"),
            {"channel": "c1"},
        ).to_row()
        assert row == {
            "id": "re1",
            "message_id": "m1",
            "user_id": "u2",
            "reaction_type": "thumbs_up",
            "created_at": None,
        }

    def test_task_defaults(self):
        row = transform_task(_doc("t1"), {"channel": "c1"}).to_row()
        assert row["status"] == "pending"
        assert row["assigned_to"] == []
        assert row["title"] == ""
        assert row["description"] == ""
        assert row["due_date"] is None
        assert row["channel_id"] == "c1"

    def test_task_due_date_normalized(self):
        row = transform_task(
            _doc("t1", dueDate=TS, status="done", assignedTo=["u1"]), {"channel": "c1"}
        ).to_row()
        assert row["due_date"] == TS_ISO
        assert row["status"] == "done"
        assert row["assigned_to"] == ["u1"]

    def test_notification_defaults(self):
        row = transform_notification(_doc("n1"), {}).to_row()
        assert row == {
            "id": "n1",
            "user_id": None,
            "type": "",
            "content": "",
            "is_read": False,
            "related_id": None,
            "created_at": None,
        }


# ---------------------------------------------------------------------------
# CRM
# ---------------------------------------------------------------------------


class TestTransformStudent:
    """Tests for transform_student()."""

    def test_renames_camel_case_fields(self):
        row = transform_student(
            _doc(
                "s1",
                name="Carla",
                funnelStep="fs1",
                avatarColor="#fff",
                createdBy="u1",
                createdAt=TS,
                updatedAt=TS,
            ),
            {},
        ).to_row()
        assert row["funnel_step"] == "fs1"
        assert row["avatar_color"] == "#fff"
        assert row["created_by"] == "u1"
        assert row["created_at"] == TS_ISO
        assert row["updated_at"] == TS_ISO

    def test_defaults(self):
        row = transform_student(_doc("s1"), {}).to_row()
        for column in ("name", "email", "phone", "location", "city", "notes"):
            assert row[column] == ""
        assert row["courses"] == []
        assert row["created_by"] is None

    def test_missing_timestamps_default_to_now(self):
        row = transform_student(_doc("s1"), {}).to_row()
        assert row["created_at"].endswith("Z")
        assert row["updated_at"].endswith("Z")

    @patch("firestore_migrator.services.transformers.now_iso")
    def test_defaulted_timestamps_change_between_runs(self, mock_now):
        mock_now.side_effect = ["2024-05-01T00:00:00.000Z", "2024-06-01T00:00:00.000Z"]
        first = transform_student(_doc("s1", name="Carla"), {}).to_row()
        second = transform_student(_doc("s1", name="Carla"), {}).to_row()
        assert first["created_at"] == "2024-05-01T00:00:00.000Z"
        assert second["created_at"] == "2024-06-01T00:00:00.000Z"
        assert {**first, "created_at": None, "updated_at": None} == {
            **second,
            "created_at": None,
            "updated_at": None,
        }

    @patch("firestore_migrator.services.transformers.now_iso")
    def test_source_timestamps_stable_between_runs(self, mock_now):
        mock_now.side_effect = ["2024-05-01T00:00:00.000Z", "2024-06-01T00:00:00.000Z"]
        doc = _doc("s1", name="Carla", createdAt=TS, updatedAt=TS)
        assert transform_student(doc, {}).to_row() == transform_student(doc, {}).to_row()


class TestTransformClassAndCourse:
    """Tests for transform_class() and transform_course()."""

    def test_class_defaults(self):
        row = transform_class(_doc("cl1"), {}).to_row()
        assert row["status"] == "active"
        assert row["teachers"] == []
        assert row["class_type"] == ""
        assert row["channel_id"] is None

    def test_class_mapping(self):
        row = transform_class(
            _doc("cl1", classType="group", channelId="c1", status="archived"), {}
        ).to_row()
        assert row["class_type"] == "group"
        assert row["channel_id"] == "c1"
        assert row["status"] == "archived"

    def test_course_references_class(self):
        row = transform_course(_doc("co1", classId="cl1", courseType="intensive"), {}).to_row()
        assert row["class_id"] == "cl1"
        assert row["course_type"] == "intensive"
        assert row["status"] == "active"


class TestTransformEnrollment:
    """Tests for transform_enrollment()."""

    def test_enrollment_date_falls_back_to_created_at(self):
        created = datetime(2023, 9, 1, 12, 0, tzinfo=timezone.utc)
        row = transform_enrollment(
            _doc("e1", studentId="s1", courseId="co1", createdAt=created), {}
        ).to_row()
        assert row["enrollment_date"] == "2023-09-01T12:00:00.000Z"
        assert row["created_at"] == "2023-09-01T12:00:00.000Z"

    def test_explicit_enrollment_date_wins(self):
        row = transform_enrollment(
            _doc("e1", enrollmentDate=TS, createdAt=datetime(2020, 1, 1)), {}
        ).to_row()
        assert row["enrollment_date"] == TS_ISO

    def test_no_dates_leaves_enrollment_date_empty(self):
        row = transform_enrollment(_doc("e1"), {}).to_row()
        assert row["enrollment_date"] is None
        assert row["created_at"] is not None

    def test_status_defaults(self):
        row = transform_enrollment(_doc("e1"), {}).to_row()
        assert row["status"] == "active"
        assert row["payment_status"] == "pending"
        assert row["student_id"] is None


class TestTransformPayment:
    """Tests for transform_payment()."""

    def test_nested_timestamps_converted(self):
        row = transform_payment(
            _doc("p1", amount=99.5, paymentDate=TS, paymentMethod="card"), {}
        ).to_row()
        assert row["amount"] == 99.5
        assert row["payment_date"] == TS_ISO
        assert row["payment_method"] == "card"

    def test_defaults(self):
        row = transform_payment(_doc("p1"), {}).to_row()
        assert row["amount"] is None
        assert row["currency"] == ""
        assert row["status"] == "completed"
        assert row["notes"] == ""
        assert row["transaction_id"] is None


class TestOptionTransformers:
    """Tests for transform_option() and transform_city()."""

    def test_option(self):
        assert transform_option(_doc("p1", value="Instagram"), {}).to_row() == {
            "id": "p1",
            "value": "Instagram",
        }

    def test_option_default_value(self):
        assert transform_option(_doc("p1"), {}).to_row() == {"id": "p1", "value": ""}

    def test_city_keeps_country(self):
        assert transform_city(_doc("ct1", value="Madrid", countryId="co1"), {}).to_row() == {
            "id": "ct1",
            "value": "Madrid",
            "country_id": "co1",
        }
