from sqlalchemy import Column, Integer, String, DateTime, Text
from datetime import datetime
from app.database import Base

REMINDER_TYPES = ('due_date', 'two_days_before', 'follow_up')


class Reminder(Base):
    __tablename__ = "reminders"

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(String(64), nullable=False, index=True)
    reminder_type = Column(String(20), nullable=False, default='due_date')
    subject_title = Column(String(500), nullable=False)
    body = Column(Text, nullable=True)
    due_date = Column(DateTime, nullable=True)
    scheduled_for = Column(DateTime, nullable=False, index=True)
    sent_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "recipientId": self.recipient_id,
            "reminderType": self.reminder_type,
            "subjectTitle": self.subject_title,
            "body": self.body,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "scheduledFor": self.scheduled_for.isoformat() if self.scheduled_for else None,
            "sentAt": self.sent_at.isoformat() if self.sent_at else None,
        }
