"""Practice desk - task workflow, compliance scheduling and invoicing core."""

__version__ = "0.1.0"

from practice_desk.api import PracticeAPIClient, PracticeAPIError
from practice_desk.cache import QueryCache
from practice_desk.calendar_view import (
    compliance_tasks,
    frequency_counts,
    tasks_due_on,
    tasks_in_month,
)
from practice_desk.compliance import (
    ComplianceFrequency,
    apply_compliance_schedule,
    compute_compliance_end_date,
)
from practice_desk.config import configure_logging, get_settings
from practice_desk.invoicing import InvoiceTotals, compute_invoice_totals
from practice_desk.models import Task, TaskStatus, TimeEntry
from practice_desk.notifications import Notification, Notifier
from practice_desk.tasks import TaskService
from practice_desk.timer import TaskTimer
from practice_desk.validation import ValidationResult, validate_compliance_years
from practice_desk.workflow import (
    StatusControl,
    StatusRank,
    TaskWorkflowService,
    available_transitions,
)

__all__ = [
    # Version
    "__version__",
    # API
    "PracticeAPIClient",
    "PracticeAPIError",
    "QueryCache",
    # Models
    "Task",
    "TaskStatus",
    "TimeEntry",
    # Workflow
    "StatusRank",
    "available_transitions",
    "TaskWorkflowService",
    "StatusControl",
    # Compliance & validation
    "ComplianceFrequency",
    "compute_compliance_end_date",
    "apply_compliance_schedule",
    # Compliance calendar
    "compliance_tasks",
    "tasks_due_on",
    "tasks_in_month",
    "frequency_counts",
    "ValidationResult",
    "validate_compliance_years",
    # Invoicing & time
    "InvoiceTotals",
    "compute_invoice_totals",
    "TaskTimer",
    # Services
    "TaskService",
    "Notification",
    "Notifier",
    # Config
    "get_settings",
    "configure_logging",
]
