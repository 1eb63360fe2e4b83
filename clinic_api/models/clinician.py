from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from ..core.database import Base

CLINICIAN_NAME_PREFIX = "Dr. "

class Clinician(Base):
    __tablename__ = "clinicians"
    
    # Opaque identifier supplied by callers
    id = Column(String(255), primary_key=True)
    
    name = Column(String(255), nullable=False)
    specialty = Column(String(100), nullable=True)
    
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    
    appointments = relationship("Appointment", back_populates="clinician")
    
    @staticmethod
    def placeholder_name(clinician_id: str) -> str:
        return f"{CLINICIAN_NAME_PREFIX}{clinician_id}"
    
    def __repr__(self):
        return f"<Clinician(id='{self.id}', name='{self.name}', specialty='{self.specialty}')>"
