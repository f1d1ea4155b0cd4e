# Re-export all models for convenient imports
from prefect_portal.models.user import User, UserRoleAssignment, AppRole, Theme
from prefect_portal.models.academic import Department, AcademicYear
from prefect_portal.models.attendance import Attendance, AttendanceStatus
from prefect_portal.models.complaint import Complaint, ComplaintMessage, ComplaintStatus
from prefect_portal.models.incident import IncidentReport, IncidentSeverity
from prefect_portal.models.recruitment import PrefectApplication, ApplicationStatus
from prefect_portal.models.duty import DutyAssignment, DutyReport, DutyStatus
from prefect_portal.models.gate_log import GateAssistanceLog
from prefect_portal.models.weekly_report import WeeklyReport
from prefect_portal.models.evaluation import PerformanceEvaluation
from prefect_portal.models.event import Event, EventAssignment
from prefect_portal.models.training import TrainingCategory, TrainingMaterial
from prefect_portal.models.conversation import (
    Conversation,
    ConversationParticipant,
    ConversationMessage,
    ConversationType,
)

__all__ = [
    # Users
    "User",
    "UserRoleAssignment",
    "AppRole",
    "Theme",
    # Reference data
    "Department",
    "AcademicYear",
    # Feature tables
    "Attendance",
    "AttendanceStatus",
    "Complaint",
    "ComplaintMessage",
    "ComplaintStatus",
    "IncidentReport",
    "IncidentSeverity",
    "PrefectApplication",
    "ApplicationStatus",
    "DutyAssignment",
    "DutyReport",
    "DutyStatus",
    "GateAssistanceLog",
    "WeeklyReport",
    "PerformanceEvaluation",
    "Event",
    "EventAssignment",
    "TrainingCategory",
    "TrainingMaterial",
    # Conversations
    "Conversation",
    "ConversationParticipant",
    "ConversationMessage",
    "ConversationType",
]
