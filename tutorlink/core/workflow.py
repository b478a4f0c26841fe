# tutorlink/core/workflow.py
# Status transition tables for every workflow entity
#
# Consulted by the API endpoints before any status write and by the client
# services before sending a mutation whose current status is known locally.
#
#   TutorRequest:    Active → Inactive | Assign | Completed
#                    Inactive → Active,  Assign → Completed
#   TutorAssignment: pending → accepted | rejected
#                    accepted → completed | rejected
#   Application:     pending → approved | rejected | withdrawn
#                    approved | rejected → withdrawn,  withdrawn → pending
#   DemoClass:       pending → accepted | rejected | cancelled
#                    accepted → pending | completed | cancelled
#
# Moving to the current status is always an idempotent no-op.

from typing import Dict, FrozenSet

from tutorlink.core.errors import InvalidStateTransition

TUTOR_REQUEST = "tutor_request"
ASSIGNMENT = "assignment"
APPLICATION = "application"
DEMO_CLASS = "demo_class"

TUTOR_REQUEST_STATUSES = ("Active", "Inactive", "Completed", "Assign")
ASSIGNMENT_STATUSES = ("pending", "accepted", "rejected", "completed")
APPLICATION_STATUSES = ("pending", "approved", "rejected", "withdrawn")
DEMO_CLASS_STATUSES = ("pending", "accepted", "rejected", "completed", "cancelled")

_TRANSITIONS: Dict[str, Dict[str, FrozenSet[str]]] = {
    TUTOR_REQUEST: {
        "Active": frozenset({"Inactive", "Assign", "Completed"}),
        "Inactive": frozenset({"Active"}),
        "Assign": frozenset({"Completed"}),
        "Completed": frozenset(),
    },
    ASSIGNMENT: {
        "pending": frozenset({"accepted", "rejected"}),
        "accepted": frozenset({"completed", "rejected"}),
        "rejected": frozenset(),
        "completed": frozenset(),
    },
    APPLICATION: {
        "pending": frozenset({"approved", "rejected", "withdrawn"}),
        "approved": frozenset({"withdrawn"}),
        "rejected": frozenset({"withdrawn"}),
        "withdrawn": frozenset({"pending"}),
    },
    DEMO_CLASS: {
        "pending": frozenset({"accepted", "rejected", "cancelled"}),
        "accepted": frozenset({"pending", "completed", "cancelled"}),
        "rejected": frozenset(),
        "completed": frozenset(),
        "cancelled": frozenset(),
    },
}

_LABELS = {
    TUTOR_REQUEST: "tutor request",
    ASSIGNMENT: "assignment",
    APPLICATION: "application",
    DEMO_CLASS: "demo class",
}


def _table(entity: str) -> Dict[str, FrozenSet[str]]:
    try:
        return _TRANSITIONS[entity]
    except KeyError:
        raise ValueError(f"Unknown workflow entity '{entity}'.") from None


def statuses(entity: str) -> FrozenSet[str]:
    """All statuses known for an entity."""
    return frozenset(_table(entity))


def next_states(entity: str, current: str) -> FrozenSet[str]:
    """Statuses reachable in one step from `current` (excluding `current` itself)."""
    table = _table(entity)
    if current not in table:
        raise ValueError(f"Unknown {_LABELS[entity]} status '{current}'.")
    return table[current]


def is_terminal(entity: str, status: str) -> bool:
    return not next_states(entity, status)


def can_transition(entity: str, current: str, target: str) -> bool:
    if target not in _table(entity):
        return False
    return target == current or target in next_states(entity, current)


def ensure_transition(entity: str, current: str, target: str) -> None:
    """
    Raise InvalidStateTransition unless current → target is allowed.
    Unknown target statuses are rejected the same way.
    """
    if can_transition(entity, current, target):
        return

    label = _LABELS[entity]
    if target not in _table(entity):
        message = f"'{target}' is not a valid {label} status."
    elif is_terminal(entity, current):
        message = f"Cannot change a {label} that is already '{current}'."
    else:
        allowed = ", ".join(sorted(next_states(entity, current)))
        message = (
            f"Cannot move a {label} from '{current}' to '{target}'. "
            f"Allowed: {allowed}."
        )
    raise InvalidStateTransition(message, current=current, target=target)
