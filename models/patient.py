"""
Patient data model
"""

from sqlalchemy import Column, Integer, String, Date
from sqlalchemy.orm import relationship
from database.connection import Base


class Patient(Base):
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    date_of_birth = Column(Date)
    phone = Column(String(30))

    # Newest visit first, matching the detail view
    visits = relationship(
        "Visit",
        back_populates="patient",
        order_by="Visit.date.desc()",
    )

    @property
    def name(self):
        return f"{self.first_name or ''} {self.last_name or ''}".strip()

