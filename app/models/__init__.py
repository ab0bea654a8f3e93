# Database models package
from app.models.profile import Profile
from app.models.career_goal import CareerGoal
from app.models.performance_review import PerformanceReview
from app.models.mock_interview import MockInterview
from app.models.office_hours import OfficeHoursRecord
from app.models.resume_version import ResumeVersion
from app.models.job_application import JobApplication
from app.models.networking_interaction import NetworkingInteraction
from app.models.reminder import Reminder
from app.models.notification import Notification

__all__ = [
    "Profile",
    "CareerGoal",
    "PerformanceReview",
    "MockInterview",
    "OfficeHoursRecord",
    "ResumeVersion",
    "JobApplication",
    "NetworkingInteraction",
    "Reminder",
    "Notification",
]
