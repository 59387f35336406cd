"""
User model for authentication and authorization
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base

class User(Base):
    """Staff account; password is empty for OAuth-only accounts"""
    __tablename__ = "users"
    
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=True)
    role = Column(String(20), default="Doctor", nullable=False)  # Admin, Doctor, Nurse
    oauth_provider = Column(String(30), nullable=True)
    oauth_id = Column(String(255), nullable=True)
    facility_id = Column(Integer, ForeignKey("facilities.id"), nullable=True)
    license_number = Column(String(50), nullable=True)
    specialization = Column(String(100), nullable=True)
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    facility = relationship("Facility", back_populates="users")
    
    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
