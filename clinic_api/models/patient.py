from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base

PATIENT_NAME_PREFIX = "Patient "

class Patient(Base):
    __tablename__ = "patients"
    
    id = Column(String(255), primary_key=True)
    
    name = Column(String(255), nullable=False)
    
    # Contact information
    email = Column(String(255), nullable=True)
    phone = Column(String(20), nullable=True)
    
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    
    appointments = relationship("Appointment", back_populates="patient")
    
    @staticmethod
    def placeholder_name(patient_id: str) -> str:
        return f"{PATIENT_NAME_PREFIX}{patient_id}"
    
    def __repr__(self):
        return f"<Patient(id='{self.id}', name='{self.name}')>"
