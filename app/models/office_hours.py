from sqlalchemy import Column, Integer, String, DateTime, Text, JSON
from datetime import datetime
from app.database import Base


class OfficeHoursRecord(Base):
    __tablename__ = "office_hours_records"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(String(64), nullable=False, index=True)
    coach_id = Column(String(64), nullable=False)
    session_date = Column(DateTime, nullable=False, index=True)
    duration_minutes = Column(Integer, nullable=False, default=30)
    topics_covered = Column(JSON, nullable=False, default=list)
    action_items = Column(JSON, nullable=False, default=list)
    meeting_notes = Column(Text)
    recording_url = Column(String(1000))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "studentId": self.student_id,
            "coachId": self.coach_id,
            "sessionDate": self.session_date.isoformat() if self.session_date else None,
            "durationMinutes": self.duration_minutes,
            "topicsCovered": self.topics_covered or [],
            "actionItems": self.action_items or [],
            "meetingNotes": self.meeting_notes,
            "recordingUrl": self.recording_url,
        }
