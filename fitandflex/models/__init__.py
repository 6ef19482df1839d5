from .branch import Branch
from .class_schedule_pattern import ClassSchedulePattern
from .class_subscription import ClassSubscription
from .fitness_class import FitnessClass
from .payment import Payment, PaymentMethod, PaymentStatus
from .product import Product
from .reservation import Reservation, ReservationStatus
from .role import Role
from .schedule import Schedule
from .user import User
from .user_membership import MembershipStatus, UserMembership

__all__ = [
    "Branch",
    "ClassSchedulePattern",
    "ClassSubscription",
    "FitnessClass",
    "MembershipStatus",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "Product",
    "Reservation",
    "ReservationStatus",
    "Role",
    "Schedule",
    "User",
    "UserMembership",
]
