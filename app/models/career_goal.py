from sqlalchemy import Column, Integer, String, DateTime, Date, JSON
from datetime import datetime
from app.database import Base

MAX_TARGET_ITEMS = 3

DEFAULT_GOALS = {
    "weekly_application_goal": 5,
    "weekly_connection_goal": 5,
    "weekly_interview_goal": 2,
    "weekly_event_goal": 1,
    "monthly_alumni_goal": 3,
    "monthly_industry_goal": 5,
    "monthly_recruiter_goal": 3,
}


class CareerGoal(Base):
    """Job-search campaign goals. One row per student (upsert)."""
    __tablename__ = "career_goals"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(String(64), nullable=False, unique=True, index=True)

    # Targets (each capped at MAX_TARGET_ITEMS)
    target_roles = Column(JSON, nullable=False, default=list)
    target_industries = Column(JSON, nullable=False, default=list)

    preferred_company_size = Column(JSON, nullable=False, default=list)
    preferred_location = Column(String(255))
    geographic_preferences = Column(JSON, nullable=False, default=list)
    job_boards = Column(JSON, nullable=False, default=list)
    target_companies = Column(JSON, nullable=False, default=list)

    # Weekly goals
    weekly_application_goal = Column(Integer, nullable=False, default=5)
    weekly_connection_goal = Column(Integer, nullable=False, default=5)
    weekly_interview_goal = Column(Integer, nullable=False, default=2)
    weekly_event_goal = Column(Integer, nullable=False, default=1)
    quality_match_target = Column(Integer, nullable=True)

    # Monthly goals
    monthly_alumni_goal = Column(Integer, nullable=False, default=3)
    monthly_industry_goal = Column(Integer, nullable=False, default=5)
    monthly_recruiter_goal = Column(Integer, nullable=False, default=3)

    campaign_start_date = Column(Date, nullable=True)
    campaign_end_date = Column(Date, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "studentId": self.student_id,
            "targetRoles": self.target_roles or [],
            "targetIndustries": self.target_industries or [],
            "preferredCompanySize": self.preferred_company_size or [],
            "preferredLocation": self.preferred_location,
            "geographicPreferences": self.geographic_preferences or [],
            "jobBoards": self.job_boards or [],
            "targetCompanies": self.target_companies or [],
            "weeklyApplicationGoal": self.weekly_application_goal,
            "weeklyConnectionGoal": self.weekly_connection_goal,
            "weeklyInterviewGoal": self.weekly_interview_goal,
            "weeklyEventGoal": self.weekly_event_goal,
            "qualityMatchTarget": self.quality_match_target,
            "monthlyAlumniGoal": self.monthly_alumni_goal,
            "monthlyIndustryGoal": self.monthly_industry_goal,
            "monthlyRecruiterGoal": self.monthly_recruiter_goal,
            "campaignStartDate": self.campaign_start_date.isoformat() if self.campaign_start_date else None,
            "campaignEndDate": self.campaign_end_date.isoformat() if self.campaign_end_date else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
