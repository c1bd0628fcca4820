"""Shared test fixtures for the firestore_migrator test suite."""

from datetime import datetime, timezone

import pytest

TS_A = datetime(2024, 1, 2, 3, 4, 5, 123000, tzinfo=timezone.utc)
TS_B = datetime(2024, 1, 2, 3, 5, 0, tzinfo=timezone.utc)
TS_C = datetime(2023, 9, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture()
def sample_users():
    """Return the ``users`` collection keyed by document id."""
    return {
        "u1": {
            "displayName": "Alice Smith",
            "email": "alice@example.com",
            "roles": ["admin"],
            "isOnboardingComplete": True,
            "createdAt": TS_A,
        },
        "u2": {"displayName": "Bob Jones", "email": "bob@example.com"},
    }


@pytest.fixture()
def sample_collections(sample_users):
    """Return a small Firestore database as ``{collection path: {id: data}}``.

    One channel ``c1`` holds message ``m1`` with reply ``r1``, a reaction
    and a task; the CRM collections hold one student enrolled in one
    course with one payment. Every CRM document carries its own
    timestamps so repeated runs produce identical rows.
    """
    return {
        "users": sample_users,
        "funnelSteps": {"fs1": {"value": "Lead"}, "fs2": {"value": "Customer"}},
        "courseInterests": {"ci1": {"value": "English"}},
        "platforms": {"p1": {"value": "Instagram"}},
        "countries": {"co1": {"value": "Spain"}},
        "cities": {"ct1": {"value": "Madrid", "countryId": "co1"}},
        "categories": {"cat1": {"value": "General"}, "cat2": {"value": "Billing"}},
        "channels": {
            "c1": {"name": "General", "members": ["u1", "u2"], "createdBy": "u1"},
        },
        "channels/c1/messages": {
            "m1": {"userId": "u1", "content": "hi", "createdAt": TS_A},
        },
        "channels/c1/messages/m1/replies": {
            "r1": {"userId": "u1", "content": "hello back", "createdAt": TS_B},
        },
        "channels/c1/reactions": {
            "re1": {"messageId": "m1", "userId": "u2", "type": "thumbs_up"},
        },
        "channels/c1/tasks": {
            "t1": {"userId": "u1", "title": "Prepare lesson", "assignedTo": ["u2"]},
        },
        "students": {
            "s1": {
                "name": "Carla",
                "email": "carla@example.com",
                "funnelStep": "fs1",
                "createdAt": TS_C,
                "updatedAt": TS_C,
            },
        },
        "classes": {
            "cl1": {
                "name": "B1 mornings",
                "classType": "group",
                "createdAt": TS_C,
                "updatedAt": TS_C,
            },
        },
        "courses": {
            "co-1": {
                "name": "English B1",
                "classId": "cl1",
                "createdAt": TS_C,
                "updatedAt": TS_C,
            },
        },
        "enrollments": {
            "e1": {
                "studentId": "s1",
                "courseId": "co-1",
                "classId": "cl1",
                "createdAt": TS_C,
                "updatedAt": TS_C,
            },
        },
        "payments": {
            "pay1": {
                "studentId": "s1",
                "enrollmentId": "e1",
                "amount": 120,
                "currency": "EUR",
                "paymentDate": TS_C,
                "createdAt": TS_C,
                "updatedAt": TS_C,
            },
        },
        "notifications": {
            "n1": {
                "userId": "u1",
                "type": "mention",
                "content": "You were mentioned",
                "createdAt": TS_B,
            },
        },
    }
