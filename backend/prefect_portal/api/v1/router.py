from fastapi import APIRouter

from prefect_portal.api.v1.endpoints import (
    academic,
    analytics,
    attendance,
    auth,
    complaints,
    conversations,
    duties,
    evaluations,
    events,
    gate_logs,
    incidents,
    navigation,
    profiles,
    recruitment,
    training,
    users,
    weekly_reports,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(navigation.router, prefix="/navigation", tags=["Navigation"])
api_router.include_router(profiles.router, prefix="/profiles", tags=["Profiles"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(attendance.router, prefix="/attendance", tags=["Attendance"])
api_router.include_router(complaints.router, prefix="/complaints", tags=["Complaints"])
api_router.include_router(incidents.router, prefix="/incidents", tags=["Incidents"])
api_router.include_router(recruitment.router, prefix="/recruitment", tags=["Recruitment"])
api_router.include_router(duties.router, prefix="/duties", tags=["Duties"])
api_router.include_router(gate_logs.router, prefix="/gate-logs", tags=["Gate Logs"])
api_router.include_router(weekly_reports.router, prefix="/weekly-reports", tags=["Weekly Reports"])
api_router.include_router(evaluations.router, prefix="/evaluations", tags=["Evaluations"])
api_router.include_router(events.router, prefix="/events", tags=["Events"])
api_router.include_router(training.router, prefix="/training", tags=["Training"])
# /academic-years and /departments
api_router.include_router(academic.router, tags=["Reference Data"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["Analytics"])
api_router.include_router(conversations.router, prefix="/conversations", tags=["Conversations"])
