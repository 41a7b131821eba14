"""
Ingestion status state machine.

PENDING -> PARSING -> CHUNKING -> EMBEDDING -> INDEXING -> COMPLETED, with
FAILED reachable from every non-terminal state. FAILED -> PARSING is the
retry edge. COMPLETED has no exits.

Dependencies: knowledgebase.boundary.db.models.document_model
System role: Single source of legal ingestion status changes
"""

from knowledgebase.boundary.db.models.document_model import IngestionStatus
from knowledgebase.core.exceptions import IllegalStateTransitionError

TRANSITIONS: dict[IngestionStatus, frozenset[IngestionStatus]] = {
    IngestionStatus.PENDING: frozenset({IngestionStatus.PARSING, IngestionStatus.FAILED}),
    IngestionStatus.PARSING: frozenset({IngestionStatus.CHUNKING, IngestionStatus.FAILED}),
    IngestionStatus.CHUNKING: frozenset({IngestionStatus.EMBEDDING, IngestionStatus.FAILED}),
    IngestionStatus.EMBEDDING: frozenset({IngestionStatus.INDEXING, IngestionStatus.FAILED}),
    IngestionStatus.INDEXING: frozenset({IngestionStatus.COMPLETED, IngestionStatus.FAILED}),
    IngestionStatus.FAILED: frozenset({IngestionStatus.PARSING}),
    IngestionStatus.COMPLETED: frozenset(),
}

IN_FLIGHT = frozenset({
    IngestionStatus.PARSING,
    IngestionStatus.CHUNKING,
    IngestionStatus.EMBEDDING,
    IngestionStatus.INDEXING,
})


def can_transition(current: IngestionStatus, target: IngestionStatus) -> bool:
    """Whether current -> target is in the transition table."""
    return target in TRANSITIONS[current]


def transition(current: IngestionStatus, target: IngestionStatus) -> IngestionStatus:
    """
    Validate a status change.

    Args:
        current: Status now
        target: Requested status

    Returns:
        IngestionStatus: target

    Raises:
        IllegalStateTransitionError: target is not reachable from current
    """
    if not can_transition(current, target):
        raise IllegalStateTransitionError(current.value, target.value)
    return target


def is_terminal(status: IngestionStatus) -> bool:
    """COMPLETED and FAILED end a run."""
    return status in (IngestionStatus.COMPLETED, IngestionStatus.FAILED)


def path_to_parsing(current: IngestionStatus) -> list[IngestionStatus]:
    """
    Transitions that start a new attempt from the stored status.

    A status left in flight by a crashed run is failed first, then retried.

    Args:
        current: Stored ingestion status

    Returns:
        list[IngestionStatus]: Statuses to pass through, ending in PARSING

    Raises:
        IllegalStateTransitionError: current is COMPLETED
    """
    if current in IN_FLIGHT:
        return [IngestionStatus.FAILED, IngestionStatus.PARSING]
    transition(current, IngestionStatus.PARSING)
    return [IngestionStatus.PARSING]
