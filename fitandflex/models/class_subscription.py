from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Time, func
from sqlalchemy.orm import relationship

from fitandflex.core.database import Base


class ClassSubscription(Base):
    """A user's recurring (weekly) or date-bound enrollment in a class time slot."""

    __tablename__ = "class_subscriptions"

    id_subscription = Column(Integer, primary_key=True, index=True)
    id_user = Column(Integer, ForeignKey("users.id_user"), nullable=False, index=True)
    id_class = Column(Integer, ForeignKey("classes.id_class"), nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    date = Column(Date, nullable=True)
    day_of_week = Column(Integer, nullable=False)
    recurrent = Column(Boolean, nullable=False, default=False)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=True, server_default=func.now(), onupdate=func.now())

    user = relationship("User", lazy="joined")
    fitness_class = relationship("FitnessClass", back_populates="subscriptions")
