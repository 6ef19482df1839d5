from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import relationship

from fitandflex.core.database import Base


class ReservationStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CANCELED = "CANCELED"
    ATTENDED = "ATTENDED"
    NO_SHOW = "NO_SHOW"


class Reservation(Base):
    __tablename__ = "reservations"
    __table_args__ = (
        UniqueConstraint("id_user", "id_schedule", name="uq_reservation_user_schedule"),
    )

    id_reservation = Column(Integer, primary_key=True, index=True)
    id_user = Column(Integer, ForeignKey("users.id_user"), nullable=False, index=True)
    id_schedule = Column(Integer, ForeignKey("schedules.id_schedule"), nullable=False, index=True)
    reservation_date = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default=ReservationStatus.ACTIVE.value)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=True, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="reservations")
    schedule = relationship("Schedule", back_populates="reservations", lazy="joined")
    payments = relationship("Payment", back_populates="reservation")

    @property
    def is_active(self) -> bool:
        return self.status == ReservationStatus.ACTIVE.value
