from sqlalchemy import Boolean, Column, ForeignKey, Integer, Time
from sqlalchemy.orm import relationship

from fitandflex.core.database import Base


class ClassSchedulePattern(Base):
    """Weekly time slot of a class, day_of_week is ISO (1 = Monday ... 7 = Sunday)."""

    __tablename__ = "class_schedule_patterns"

    id_pattern = Column(Integer, primary_key=True, index=True)
    id_class = Column(Integer, ForeignKey("classes.id_class"), nullable=False)
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    recurrent = Column(Boolean, nullable=False, default=True)

    fitness_class = relationship("FitnessClass", back_populates="schedule_patterns")
