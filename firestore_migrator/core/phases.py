"""The migration plan as a small tree of phases.

Top-level phases run strictly in list order because later phases hold
foreign references to rows written by earlier ones. Child phases run once
per successfully written parent document, nested under that parent's id:

    users → options → channels{messages{replies}, reactions, tasks}
          → students → classes → courses → enrollments → payments
          → notifications
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from firestore_migrator.constants import (
    CATEGORIES_COLLECTION,
    CHANNELS_COLLECTION,
    CITIES_COLLECTION,
    CLASSES_COLLECTION,
    COURSES_COLLECTION,
    CREATED_AT_FIELD,
    ENROLLMENTS_COLLECTION,
    MESSAGES_COLLECTION,
    NOTIFICATIONS_COLLECTION,
    OPTION_COLLECTIONS,
    PAYMENTS_COLLECTION,
    REACTIONS_COLLECTION,
    REPLIES_COLLECTION,
    STUDENTS_COLLECTION,
    TASKS_COLLECTION,
    USER_PROFILES_TABLE,
    USERS_COLLECTION,
)
from firestore_migrator.services import transformers as t
from firestore_migrator.services.transformers import Transformer


class WriteMode(str, Enum):
    """How a phase writes its records."""

    UPSERT = "upsert"
    PROBE_THEN_INSERT = "probe_then_insert"
    INSERT_IF_EMPTY = "insert_if_empty"


@dataclass(frozen=True)
class PhaseSpec:
    """One node of the migration plan.

    ``key`` is the conflict key for upserts and the natural key for
    probe-then-insert. ``group`` lets several top-level phases be selected
    under one name (e.g. ``options``).
    """

    name: str
    entity: str
    collection: str
    table: str
    transform: Transformer
    write_mode: WriteMode = WriteMode.UPSERT
    key: str = "id"
    order_by: str | None = CREATED_AT_FIELD
    children: tuple[PhaseSpec, ...] = ()
    group: str | None = None

    def describe(self, parents: Mapping[str, str]) -> str:
        """Human-readable label, e.g. ``replies for message m1``."""
        if not parents:
            return self.name
        entity, parent_id = list(parents.items())[-1]
        return f"{self.name} for {entity} {parent_id}"

    def walk_tree(self):
        """Yield this phase and all of its descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk_tree()


def _option_phase(collection: str, table: str) -> PhaseSpec:
    return PhaseSpec(
        name=table,
        entity=table,
        collection=collection,
        table=table,
        transform=t.transform_option,
        order_by=None,
        group="options",
    )


REPLIES_PHASE = PhaseSpec(
    name="replies",
    entity="reply",
    collection=REPLIES_COLLECTION,
    table="replies",
    transform=t.transform_reply,
)

MESSAGES_PHASE = PhaseSpec(
    name="messages",
    entity="message",
    collection=MESSAGES_COLLECTION,
    table="messages",
    transform=t.transform_message,
    children=(REPLIES_PHASE,),
)

REACTIONS_PHASE = PhaseSpec(
    name="reactions",
    entity="reaction",
    collection=REACTIONS_COLLECTION,
    table="reactions",
    transform=t.transform_reaction,
)

TASKS_PHASE = PhaseSpec(
    name="tasks",
    entity="task",
    collection=TASKS_COLLECTION,
    table="tasks",
    transform=t.transform_task,
)

DEFAULT_PHASES: tuple[PhaseSpec, ...] = (
    PhaseSpec(
        name="users",
        entity="user",
        collection=USERS_COLLECTION,
        table=USER_PROFILES_TABLE,
        transform=t.transform_user,
        write_mode=WriteMode.PROBE_THEN_INSERT,
        key="user_id",
    ),
    *(
        _option_phase(collection, table)
        for collection, table in OPTION_COLLECTIONS.items()
    ),
    PhaseSpec(
        name="cities",
        entity="cities",
        collection=CITIES_COLLECTION,
        table="cities",
        transform=t.transform_city,
        order_by=None,
        group="options",
    ),
    PhaseSpec(
        name="categories",
        entity="categories",
        collection=CATEGORIES_COLLECTION,
        table="categories",
        transform=t.transform_option,
        write_mode=WriteMode.INSERT_IF_EMPTY,
        group="options",
    ),
    PhaseSpec(
        name="channels",
        entity="channel",
        collection=CHANNELS_COLLECTION,
        table="channels",
        transform=t.transform_channel,
        children=(MESSAGES_PHASE, REACTIONS_PHASE, TASKS_PHASE),
    ),
    PhaseSpec(
        name="students",
        entity="student",
        collection=STUDENTS_COLLECTION,
        table="students",
        transform=t.transform_student,
    ),
    PhaseSpec(
        name="classes",
        entity="class",
        collection=CLASSES_COLLECTION,
        table="classes",
        transform=t.transform_class,
    ),
    PhaseSpec(
        name="courses",
        entity="course",
        collection=COURSES_COLLECTION,
        table="courses",
        transform=t.transform_course,
    ),
    PhaseSpec(
        name="enrollments",
        entity="enrollment",
        collection=ENROLLMENTS_COLLECTION,
        table="enrollments",
        transform=t.transform_enrollment,
    ),
    PhaseSpec(
        name="payments",
        entity="payment",
        collection=PAYMENTS_COLLECTION,
        table="payments",
        transform=t.transform_payment,
    ),
    PhaseSpec(
        name="notifications",
        entity="notification",
        collection=NOTIFICATIONS_COLLECTION,
        table="notifications",
        transform=t.transform_notification,
    ),
)


def phase_names(phases: tuple[PhaseSpec, ...] = DEFAULT_PHASES) -> list[str]:
    """Top-level phase names and group names, as accepted by the filters."""
    names: list[str] = []
    for phase in phases:
        for name in (phase.group, phase.name):
            if name and name not in names:
                names.append(name)
    return names
