from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship

from fitandflex.core.database import Base


class FitnessClass(Base):
    """A recurring activity offered by a branch (e.g. "Yoga Vinyasa")."""

    __tablename__ = "classes"

    id_class = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    capacity = Column(Integer, nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    id_branch = Column(Integer, ForeignKey("branches.id_branch"), nullable=False)
    id_created_by = Column(Integer, ForeignKey("users.id_user"), nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=True, server_default=func.now(), onupdate=func.now())

    branch = relationship("Branch", back_populates="classes")
    created_by = relationship("User")
    schedules = relationship(
        "Schedule", back_populates="fitness_class", cascade="all, delete-orphan"
    )
    schedule_patterns = relationship(
        "ClassSchedulePattern",
        back_populates="fitness_class",
        cascade="all, delete-orphan",
        order_by="ClassSchedulePattern.day_of_week",
    )
    subscriptions = relationship(
        "ClassSubscription", back_populates="fitness_class", cascade="all, delete-orphan"
    )
