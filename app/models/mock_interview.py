from sqlalchemy import Column, Integer, String, DateTime, Text, JSON
from datetime import datetime
from app.database import Base

INTERVIEW_TYPES = ('technical', 'behavioral')


class MockInterview(Base):
    __tablename__ = "mock_interviews"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(String(64), nullable=False, index=True)
    interviewer_id = Column(String(64), nullable=False)
    interview_date = Column(DateTime, nullable=False, index=True)
    interview_type = Column(String(20), nullable=False, default='technical')
    overall_rating = Column(Integer, nullable=False, default=5)  # 0-10
    strengths = Column(JSON, nullable=False, default=list)
    areas_for_improvement = Column(JSON, nullable=False, default=list)
    evaluation_notes = Column(Text)
    worksheet_completion_status = Column(String(30), default='not_started')
    recording_url = Column(String(1000))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "studentId": self.student_id,
            "interviewerId": self.interviewer_id,
            "interviewDate": self.interview_date.isoformat() if self.interview_date else None,
            "interviewType": self.interview_type,
            "overallRating": self.overall_rating,
            "strengths": self.strengths or [],
            "areasForImprovement": self.areas_for_improvement or [],
            "evaluationNotes": self.evaluation_notes,
            "worksheetCompletionStatus": self.worksheet_completion_status,
            "recordingUrl": self.recording_url,
        }
