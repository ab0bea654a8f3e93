from sqlalchemy import Column, Integer, String, DateTime, Text, Date
from datetime import datetime
from app.database import Base

# Statuses that have not produced a reply from the employer yet
NO_RESPONSE_STATUSES = {'draft', 'applied'}
VALID_STATUSES = {'draft', 'applied', 'screening', 'interview', 'offer', 'accepted', 'rejected', 'withdrawn'}


class JobApplication(Base):
    """
    Application tracking model
    Tracks a student's job applications through the hiring pipeline
    """
    __tablename__ = "job_applications"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(String(64), nullable=False, index=True)

    # Job details
    company_name = Column(String(255), nullable=False, index=True)
    position_title = Column(String(255), nullable=False)
    job_url = Column(String(1000))
    location = Column(String(255))

    status = Column(String(20), nullable=False, default='applied', index=True)

    # Dates
    application_date = Column(Date, nullable=False, index=True)
    last_contact_date = Column(Date)
    next_follow_up = Column(Date, index=True)

    notes = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "studentId": self.student_id,
            "companyName": self.company_name,
            "positionTitle": self.position_title,
            "jobUrl": self.job_url,
            "location": self.location,
            "status": self.status,
            "applicationDate": self.application_date.isoformat() if self.application_date else None,
            "lastContactDate": self.last_contact_date.isoformat() if self.last_contact_date else None,
            "nextFollowUp": self.next_follow_up.isoformat() if self.next_follow_up else None,
            "notes": self.notes,
        }
