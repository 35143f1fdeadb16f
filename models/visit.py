"""
Visit data model
"""

from sqlalchemy import Column, Integer, Date, Text, ForeignKey
from sqlalchemy.orm import relationship
from database.connection import Base


class Visit(Base):
    __tablename__ = "visits"

    id = Column(Integer, primary_key=True, autoincrement=True)
    patient_id = Column(
        Integer, ForeignKey("patients.id"), nullable=False, index=True
    )
    date = Column(Date, nullable=False)
    complaint = Column(Text, default="")  # presenting complaint
    exam_findings = Column(Text, default="")  # physical exam
    current_treatment = Column(Text, default="")  # conventional treatment
    homeopathic_treatment = Column(Text, default="")

    patient = relationship("Patient", back_populates="visits")

