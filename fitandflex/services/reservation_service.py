"""Business rules for booking a user onto a concrete class schedule."""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fitandflex.core import clock
from fitandflex.core.config import settings
from fitandflex.models.reservation import Reservation, ReservationStatus
from fitandflex.models.schedule import Schedule
from fitandflex.repository import reservation_repository, schedule_repository, user_repository
from fitandflex.schemas.common import PageParams
from fitandflex.schemas.reservation import ReservationCreate, ReservationStats, ReservationUpdate

logger = logging.getLogger(__name__)

_DUPLICATE_DETAIL = "User already has a reservation for this schedule"


class ReservationService:
    def __init__(self, db: Session):
        self.db = db

    def get_reservation(self, reservation_id: int) -> Reservation:
        reservation = reservation_repository.get_reservation(self.db, reservation_id)
        if reservation is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Reservation {reservation_id} not found",
            )
        return reservation

    def _get_bookable_schedule(self, schedule_id: int) -> Schedule:
        schedule = schedule_repository.get_schedule(self.db, schedule_id)
        if schedule is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Schedule {schedule_id} not found",
            )
        if not schedule.active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Schedule is not active",
            )
        if schedule.start_time <= clock.now():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot reserve a schedule that has already started",
            )
        return schedule

    def _ensure_capacity(self, schedule: Schedule) -> None:
        # Only applied when ENFORCE_RESERVATION_CAPACITY is on.
        taken = reservation_repository.count_active_for_schedule(self.db, schedule.id_schedule)
        if taken >= schedule.fitness_class.capacity:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Schedule is full",
            )

    def create_reservation(self, payload: ReservationCreate) -> Reservation:
        if user_repository.get_user(self.db, payload.id_user) is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"User {payload.id_user} not found",
            )

        schedule = self._get_bookable_schedule(payload.id_schedule)

        if reservation_repository.find_by_user_and_schedule(
            self.db, payload.id_user, payload.id_schedule
        ):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_DUPLICATE_DETAIL)

        if reservation_repository.user_has_active_reservation_at(
            self.db,
            user_id=payload.id_user,
            start_time=schedule.start_time,
            exclude_schedule_id=schedule.id_schedule,
        ):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User already has an active reservation at this time",
            )

        if settings.ENFORCE_RESERVATION_CAPACITY:
            self._ensure_capacity(schedule)

        reservation = Reservation(
            id_user=payload.id_user,
            id_schedule=schedule.id_schedule,
            reservation_date=clock.now(),
            status=ReservationStatus.ACTIVE.value,
            notes=payload.notes,
        )
        try:
            reservation_repository.create_reservation(self.db, reservation)
            self.db.commit()
        except IntegrityError as exc:
            # A concurrent request inserted the same (user, schedule) pair first
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=_DUPLICATE_DETAIL
            ) from exc

        self.db.refresh(reservation)
        logger.info(
            "Reservation %s created for user %s on schedule %s",
            reservation.id_reservation,
            reservation.id_user,
            reservation.id_schedule,
        )
        return reservation

    def list_reservations(
        self,
        params: PageParams,
        *,
        user_id: Optional[int] = None,
        schedule_id: Optional[int] = None,
        status_filter: Optional[ReservationStatus] = None,
        branch_id: Optional[int] = None,
        class_id: Optional[int] = None,
    ) -> Tuple[List[Reservation], int]:
        return reservation_repository.list_reservations(
            self.db,
            params,
            user_id=user_id,
            schedule_id=schedule_id,
            status_filter=status_filter.value if status_filter else None,
            branch_id=branch_id,
            class_id=class_id,
        )

    def list_future_reservations(self, user_id: int) -> List[Reservation]:
        return reservation_repository.list_all_reservations(
            self.db, user_id=user_id, start_from=clock.now()
        )

    def list_past_reservations(self, user_id: int) -> List[Reservation]:
        return reservation_repository.list_all_reservations(
            self.db, user_id=user_id, start_to=clock.now()
        )

    def reservation_exists(self, user_id: int, schedule_id: int) -> bool:
        return (
            reservation_repository.find_by_user_and_schedule(self.db, user_id, schedule_id)
            is not None
        )

    def _require_active(self, reservation: Reservation, action: str) -> None:
        if reservation.status != ReservationStatus.ACTIVE.value:
            logger.warning(
                "Cannot %s reservation %s in status %s",
                action,
                reservation.id_reservation,
                reservation.status,
            )
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Only active reservations can be {action} (status {reservation.status})",
            )

    def _transition(self, reservation: Reservation, new_status: ReservationStatus) -> Reservation:
        reservation.status = new_status.value
        self.db.commit()
        self.db.refresh(reservation)
        logger.info("Reservation %s is now %s", reservation.id_reservation, new_status.value)
        return reservation

    def cancel_reservation(self, reservation_id: int) -> Reservation:
        reservation = self.get_reservation(reservation_id)
        self._require_active(reservation, "canceled")
        if reservation.schedule.start_time <= clock.now():
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot cancel a reservation for a schedule that has already started",
            )
        return self._transition(reservation, ReservationStatus.CANCELED)

    def mark_attended(self, reservation_id: int) -> Reservation:
        reservation = self.get_reservation(reservation_id)
        self._require_active(reservation, "marked as attended")
        return self._transition(reservation, ReservationStatus.ATTENDED)

    def mark_no_show(self, reservation_id: int) -> Reservation:
        reservation = self.get_reservation(reservation_id)
        self._require_active(reservation, "marked as no-show")
        return self._transition(reservation, ReservationStatus.NO_SHOW)

    def update_reservation(self, reservation_id: int, payload: ReservationUpdate) -> Reservation:
        reservation = self.get_reservation(reservation_id)
        if reservation.status == ReservationStatus.ATTENDED.value:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Attended reservations cannot be modified",
            )

        update_data = payload.model_dump(exclude_unset=True)
        new_status = update_data.pop("status", None)
        if new_status is not None and new_status.value != reservation.status:
            self._require_active(reservation, f"moved to {new_status.value}")
            reservation.status = new_status.value

        for field, value in update_data.items():
            setattr(reservation, field, value)

        self.db.commit()
        self.db.refresh(reservation)
        return reservation

    def delete_reservation(self, reservation_id: int) -> None:
        reservation = self.get_reservation(reservation_id)
        if reservation.status == ReservationStatus.ATTENDED.value:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Attended reservations cannot be deleted",
            )
        reservation_repository.delete_reservation(self.db, reservation)
        self.db.commit()
        logger.info("Reservation %s deleted", reservation_id)

    def get_stats(self, user_id: Optional[int] = None) -> ReservationStats:
        if user_id is not None and user_repository.get_user(self.db, user_id) is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"User {user_id} not found",
            )
        counts = reservation_repository.count_by_status(self.db, user_id=user_id)
        return ReservationStats(
            total=sum(counts.values()),
            active=counts.get(ReservationStatus.ACTIVE.value, 0),
            canceled=counts.get(ReservationStatus.CANCELED.value, 0),
            attended=counts.get(ReservationStatus.ATTENDED.value, 0),
            no_show=counts.get(ReservationStatus.NO_SHOW.value, 0),
        )


__all__ = ["ReservationService"]
