from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base

class Appointment(Base):
    __tablename__ = "appointments"
    __table_args__ = (
        # Serves the per-clinician overlap check
        Index("ix_appointments_clinician_times", "clinician_id", "start_time", "end_time"),
        # AUTOINCREMENT on SQLite so ids are never reused
        {"sqlite_autoincrement": True},
    )
    
    id = Column(Integer, primary_key=True, index=True)
    
    clinician_id = Column(String(255), ForeignKey("clinicians.id"), nullable=False)
    patient_id = Column(String(255), ForeignKey("patients.id"), nullable=False)
    
    # Naive UTC; start inclusive, end exclusive
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    
    # Timestamps exactly as submitted, echoed back in responses
    start_text = Column(String(64), nullable=True)
    end_text = Column(String(64), nullable=True)
    
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    
    clinician = relationship("Clinician", back_populates="appointments")
    patient = relationship("Patient", back_populates="appointments")
    
    def __repr__(self):
        return (
            f"<Appointment(id={self.id}, clinician_id='{self.clinician_id}', "
            f"patient_id='{self.patient_id}', start='{self.start_time}', end='{self.end_time}')>"
        )
