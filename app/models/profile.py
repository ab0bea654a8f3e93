from sqlalchemy import Column, String, DateTime, Date
from datetime import datetime
from app.database import Base

STAFF_ROLES = {'coach', 'mentor', 'admin'}
VALID_ROLES = {'student'} | STAFF_ROLES
PROFILE_STATUSES = ('active', 'inactive', 'graduated', 'suspended', 'archived')


class Profile(Base):
    """
    Program member profile, keyed by the Supabase auth user id.
    Students carry their coach/mentor assignment and latest review labels.
    """
    __tablename__ = "profiles"

    id = Column(String(64), primary_key=True)  # Supabase user id (JWT 'sub')
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=False, default="")

    # Roles: 'student', 'coach', 'mentor', 'admin'
    role = Column(String(20), nullable=False, default='student', index=True)
    # One of PROFILE_STATUSES; only active profiles may sign in
    status = Column(String(20), nullable=False, default='active')

    coach_id = Column(String(64), nullable=True, index=True)
    mentor_id = Column(String(64), nullable=True, index=True)
    cohort = Column(String(100), nullable=True, index=True)

    # Copied from the most recent performance review
    attention_level = Column(String(20), nullable=True)
    performance_rating = Column(String(20), nullable=True)
    last_review_date = Column(Date, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "fullName": self.full_name,
            "role": self.role,
            "status": self.status,
            "coachId": self.coach_id,
            "mentorId": self.mentor_id,
            "cohort": self.cohort,
            "attentionLevel": self.attention_level,
            "performanceRating": self.performance_rating,
            "lastReviewDate": self.last_review_date.isoformat() if self.last_review_date else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def to_summary(self):
        return {"id": self.id, "fullName": self.full_name, "email": self.email, "role": self.role}
