"""
Task status rules.

Statuses form a flat set: a direct update may move a task between any two of
them. Only the dedicated "move from backlog" operation is constrained, and
those constraints live here.
"""
from taskboard.models.tasks import TaskStatus

# Where a task may land when it leaves the backlog
MOVE_TARGETS = frozenset({TaskStatus.TODO, TaskStatus.IN_PROGRESS})


def is_backlog(status) -> bool:
    return TaskStatus(status) == TaskStatus.BACKLOG


def ensure_move_target(status) -> TaskStatus:
    """Raise ValueError unless `status` is an active (todo/in_progress) state."""
    status = TaskStatus(status)
    if status not in MOVE_TARGETS:
        raise ValueError("A task can only be moved from the backlog to todo or in_progress.")
    return status


def resolve_move_assignee(
    actor_id: int,
    owner_id: int,
    current_user_id: int,
    requested_user_id: int | None,
) -> int:
    """
    Assignee after a backlog move.

    The project owner may hand the task to anyone. Anybody else keeps the
    current assignee; their requested user_id is ignored rather than refused.
    """
    if requested_user_id is None:
        return current_user_id
    if actor_id != owner_id:
        return current_user_id
    # An owner naming themselves takes the task over; the request is not
    # treated as "no change".
    return requested_user_id
