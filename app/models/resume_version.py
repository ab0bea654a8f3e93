from sqlalchemy import Column, Integer, String, DateTime, Text, UniqueConstraint
from datetime import datetime
from app.database import Base

RESUME_STATUSES = ('pending', 'approved', 'rejected')


class ResumeVersion(Base):
    __tablename__ = "resume_versions"
    __table_args__ = (
        UniqueConstraint("student_id", "version_number", name="uq_resume_student_version"),
    )

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(String(64), nullable=False, index=True)
    version_number = Column(Integer, nullable=False)
    file_url = Column(String(1000), nullable=False)
    storage_path = Column(String(500), nullable=False)
    status = Column(String(20), nullable=False, default='pending')
    feedback = Column(Text, nullable=True)
    reviewed_by = Column(String(64), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "studentId": self.student_id,
            "versionNumber": self.version_number,
            "fileUrl": self.file_url,
            "status": self.status,
            "feedback": self.feedback,
            "reviewedBy": self.reviewed_by,
            "reviewedAt": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
