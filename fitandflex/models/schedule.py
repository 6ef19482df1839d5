from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, func
from sqlalchemy.orm import relationship

from fitandflex.core.database import Base


class Schedule(Base):
    __tablename__ = "schedules"

    id_schedule = Column(Integer, primary_key=True, index=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    id_class = Column(Integer, ForeignKey("classes.id_class"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=True, server_default=func.now(), onupdate=func.now())

    fitness_class = relationship("FitnessClass", back_populates="schedules", lazy="joined")
    reservations = relationship(
        "Reservation", back_populates="schedule", cascade="all, delete-orphan"
    )
