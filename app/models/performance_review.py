from sqlalchemy import Column, Integer, String, DateTime, Date, Text, JSON, UniqueConstraint
from datetime import datetime
from app.database import Base

ATTENTION_LEVELS = ('low', 'medium', 'high', 'highest')
PERFORMANCE_RATINGS = ('outstanding', 'medium', 'red_flag')

INDICATOR_FIELDS = (
    'resume_quality',
    'application_effectiveness',
    'behavioral_performance',
    'networking_capability',
    'technical_proficiency',
    'energy_level',
)


class PerformanceReview(Base):
    """Monthly coaching review: six 0-5 indicators plus categorical labels."""
    __tablename__ = "performance_reviews"
    __table_args__ = (
        UniqueConstraint("student_id", "review_month", name="uq_review_student_month"),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(String(64), nullable=False, index=True)
    coach_id = Column(String(64), nullable=True)
    review_month = Column(String(7), nullable=False, index=True)  # YYYY-MM
    review_date = Column(Date, nullable=False)

    resume_quality = Column(Integer, nullable=False, default=0)
    application_effectiveness = Column(Integer, nullable=False, default=0)
    behavioral_performance = Column(Integer, nullable=False, default=0)
    networking_capability = Column(Integer, nullable=False, default=0)
    technical_proficiency = Column(Integer, nullable=False, default=0)
    energy_level = Column(Integer, nullable=False, default=0)

    attention_level = Column(String(20), nullable=False, default='medium')
    performance_rating = Column(String(20), nullable=False, default='medium')
    overall_notes = Column(Text)
    indicator_notes = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def indicators(self) -> dict:
        return {field: getattr(self, field) for field in INDICATOR_FIELDS}

    def to_dict(self):
        return {
            "id": self.id,
            "studentId": self.student_id,
            "coachId": self.coach_id,
            "reviewMonth": self.review_month,
            "reviewDate": self.review_date.isoformat() if self.review_date else None,
            "resumeQuality": self.resume_quality,
            "applicationEffectiveness": self.application_effectiveness,
            "behavioralPerformance": self.behavioral_performance,
            "networkingCapability": self.networking_capability,
            "technicalProficiency": self.technical_proficiency,
            "energyLevel": self.energy_level,
            "attentionLevel": self.attention_level,
            "performanceRating": self.performance_rating,
            "overallNotes": self.overall_notes,
            "indicatorNotes": self.indicator_notes or {},
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
