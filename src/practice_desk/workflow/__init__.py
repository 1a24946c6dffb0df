"""Task status workflow: rank decoding, reachability and transitions."""

from practice_desk.workflow.control import StatusControl, StatusControlView
from practice_desk.workflow.ranks import StatusBand, StatusRank
from practice_desk.workflow.service import TaskWorkflowService
from practice_desk.workflow.transitions import (
    ConfigurationError,
    IllegalTransitionError,
    TransitionInProgressError,
    WorkflowError,
    available_transitions,
    find_completed_status,
    find_new_status,
    needs_completion_fallback,
)

__all__ = [
    "StatusBand",
    "StatusRank",
    "available_transitions",
    "find_completed_status",
    "find_new_status",
    "needs_completion_fallback",
    "TaskWorkflowService",
    "StatusControl",
    "StatusControlView",
    "WorkflowError",
    "ConfigurationError",
    "IllegalTransitionError",
    "TransitionInProgressError",
]
