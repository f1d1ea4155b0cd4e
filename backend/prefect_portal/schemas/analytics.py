from pydantic import BaseModel
from typing import Dict, List

from prefect_portal.schemas.complaint import ComplaintResponse
from prefect_portal.schemas.incident import IncidentResponse
from prefect_portal.schemas.profile import ProfileSummary


class SystemStats(BaseModel):
    totals: Dict[str, int]
    roles: Dict[str, int]
    complaints_by_status: Dict[str, int]
    incidents_by_severity: Dict[str, int]
    duties_by_status: Dict[str, int]
    applications_by_status: Dict[str, int]
    attendance_by_status: Dict[str, int]
    evaluation_ratings: Dict[str, int]
    departments: Dict[str, int]


class TopPerformer(BaseModel):
    user: ProfileSummary
    average_rating: float
    evaluations: int


class CriticalIssues(BaseModel):
    incidents: List[IncidentResponse]
    complaints: List[ComplaintResponse]
