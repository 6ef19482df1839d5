"""Enrollment of users in recurring or date-bound class time slots."""

from __future__ import annotations

import logging
from datetime import date, time
from typing import List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from fitandflex.core.security import Principal
from fitandflex.models.class_subscription import ClassSubscription
from fitandflex.models.fitness_class import FitnessClass
from fitandflex.models.user import User
from fitandflex.repository import class_repository, subscription_repository, user_repository
from fitandflex.schemas.class_subscription import ClassSubscriptionCreate, SubscriptionCancelRequest

logger = logging.getLogger(__name__)


def resolve_day_of_week(
    *, recurrent: Optional[bool], on_date: Optional[date], day_of_week: Optional[int]
) -> int:
    """Check the recurrent/date exclusivity and work out the ISO day of week.

    Exactly one of ``recurrent=True`` (no date) or a concrete date (not
    recurrent) is accepted. The day comes from the request when given and is
    otherwise derived from the date.
    """
    is_recurrent = bool(recurrent)
    if is_recurrent and on_date is not None:
        raise ValueError("A subscription cannot be recurrent and bound to a date at the same time")
    if not is_recurrent and on_date is None:
        raise ValueError("A subscription must be either recurrent or bound to a date")

    if day_of_week is None:
        if on_date is None:
            raise ValueError("day_of_week is required for recurrent subscriptions")
        day_of_week = on_date.isoweekday()

    if not 1 <= day_of_week <= 7:
        raise ValueError("day_of_week must be between 1 (Monday) and 7 (Sunday)")
    return day_of_week


class ClassSubscriptionService:
    def __init__(self, db: Session):
        self.db = db

    def _bad_request(self, detail: str) -> HTTPException:
        logger.warning("Subscription rejected: %s", detail)
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

    def _get_user(self, user_id: int) -> User:
        user = user_repository.get_user(self.db, user_id)
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"User {user_id} not found",
            )
        return user

    def _get_class(self, class_id: int, *, lock: bool = False) -> FitnessClass:
        if lock:
            fitness_class = class_repository.lock_class(self.db, class_id)
        else:
            fitness_class = class_repository.get_class(self.db, class_id)
        if fitness_class is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Class {class_id} not found",
            )
        return fitness_class

    def get_subscription(self, subscription_id: int) -> ClassSubscription:
        subscription = subscription_repository.get_subscription(self.db, subscription_id)
        if subscription is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Subscription {subscription_id} not found",
            )
        return subscription

    def create_subscription(
        self, payload: ClassSubscriptionCreate, principal: Optional[Principal] = None
    ) -> ClassSubscription:
        try:
            day_of_week = resolve_day_of_week(
                recurrent=payload.recurrent,
                on_date=payload.date,
                day_of_week=payload.day_of_week,
            )
        except ValueError as exc:
            raise self._bad_request(str(exc)) from exc

        if payload.end_time <= payload.start_time:
            raise self._bad_request("end_time must be after start_time")

        self._get_user(payload.id_user)
        # Row lock serializes concurrent capacity checks on the same class
        fitness_class = self._get_class(payload.id_class, lock=True)
        if not fitness_class.active:
            raise self._bad_request("Class is not active")

        if (
            principal is not None
            and not principal.is_super_admin
            and principal.branch_id is not None
            and principal.branch_id != fitness_class.id_branch
        ):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Class belongs to another branch",
            )

        on_date = None if payload.recurrent else payload.date
        duplicate = subscription_repository.find_duplicate(
            self.db,
            user_id=payload.id_user,
            class_id=payload.id_class,
            day_of_week=day_of_week,
            start_time=payload.start_time,
            end_time=payload.end_time,
            on_date=on_date,
        )
        if duplicate is not None and duplicate.active:
            raise self._bad_request("User is already subscribed to this class slot")

        if on_date is not None:
            self._ensure_slot_capacity(fitness_class, on_date, payload.start_time, payload.end_time)

        if duplicate is not None:
            duplicate.active = True
            self.db.commit()
            self.db.refresh(duplicate)
            logger.info("Subscription %s reactivated", duplicate.id_subscription)
            return duplicate

        subscription = ClassSubscription(
            id_user=payload.id_user,
            id_class=payload.id_class,
            start_time=payload.start_time,
            end_time=payload.end_time,
            date=on_date,
            day_of_week=day_of_week,
            recurrent=on_date is None,
            active=True,
        )
        subscription_repository.create_subscription(self.db, subscription)
        self.db.commit()
        self.db.refresh(subscription)
        logger.info(
            "User %s subscribed to class %s (day %s, %s-%s, date %s)",
            subscription.id_user,
            subscription.id_class,
            day_of_week,
            payload.start_time,
            payload.end_time,
            on_date,
        )
        return subscription

    def _ensure_slot_capacity(
        self, fitness_class: FitnessClass, on_date: date, start_time: time, end_time: time
    ) -> None:
        taken = subscription_repository.count_active_for_slot(
            self.db,
            class_id=fitness_class.id_class,
            on_date=on_date,
            start_time=start_time,
            end_time=end_time,
        )
        if taken >= fitness_class.capacity:
            raise self._bad_request(
                f"Class slot is full ({taken}/{fitness_class.capacity}) on {on_date}"
            )

    def cancel_subscription(self, subscription_id: int) -> ClassSubscription:
        subscription = self.get_subscription(subscription_id)
        subscription.active = False
        self.db.commit()
        self.db.refresh(subscription)
        logger.info("Subscription %s canceled", subscription_id)
        return subscription

    def cancel_for_date(self, payload: SubscriptionCancelRequest) -> int:
        subscriptions = subscription_repository.list_active_for_user_on_date(
            self.db,
            user_id=payload.id_user,
            class_id=payload.id_class,
            on_date=payload.date,
            start_time=payload.start_time,
            end_time=payload.end_time,
        )
        if not subscriptions:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No active subscription found for that date",
            )
        for subscription in subscriptions:
            subscription.active = False
        self.db.commit()
        return len(subscriptions)

    def delete_subscription(self, subscription_id: int) -> None:
        subscription = self.get_subscription(subscription_id)
        subscription_repository.delete_subscription(self.db, subscription)
        self.db.commit()

    def list_by_class(self, class_id: int, *, active_only: bool = True) -> List[ClassSubscription]:
        self._get_class(class_id)
        return subscription_repository.list_by_class(self.db, class_id, active_only=active_only)

    def list_by_user(self, user_id: int, *, active_only: bool = True) -> List[ClassSubscription]:
        self._get_user(user_id)
        return subscription_repository.list_by_user(self.db, user_id, active_only=active_only)

    def list_users_by_class(self, class_id: int) -> List[User]:
        self._get_class(class_id)
        return subscription_repository.list_users_by_class(self.db, class_id)


__all__ = ["ClassSubscriptionService", "resolve_day_of_week"]
