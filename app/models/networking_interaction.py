from sqlalchemy import Column, Integer, String, DateTime, Text, Date
from datetime import datetime
from app.database import Base

INTERACTION_TYPES = {'industry_professional', 'alumni', 'recruiter', 'hiring_manager', 'peer', 'other'}


class NetworkingInteraction(Base):
    __tablename__ = "networking_interactions"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(String(64), nullable=False, index=True)

    contact_name = Column(String(255), nullable=False)
    company = Column(String(255))
    role = Column(String(255))
    interaction_type = Column(String(30), nullable=False, default='industry_professional')
    interaction_method = Column(String(30), nullable=False, default='linkedin')
    interaction_date = Column(Date, nullable=False, index=True)

    discussion_points = Column(Text)
    follow_up_items = Column(Text)
    next_steps = Column(Text)
    next_follow_up_date = Column(Date, nullable=True)

    linkedin_url = Column(String(500))
    email = Column(String(255))
    phone = Column(String(50))
    notes = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "studentId": self.student_id,
            "contactName": self.contact_name,
            "company": self.company,
            "role": self.role,
            "interactionType": self.interaction_type,
            "interactionMethod": self.interaction_method,
            "interactionDate": self.interaction_date.isoformat() if self.interaction_date else None,
            "discussionPoints": self.discussion_points,
            "followUpItems": self.follow_up_items,
            "nextSteps": self.next_steps,
            "nextFollowUpDate": self.next_follow_up_date.isoformat() if self.next_follow_up_date else None,
            "linkedinUrl": self.linkedin_url,
            "email": self.email,
            "phone": self.phone,
            "notes": self.notes,
        }
