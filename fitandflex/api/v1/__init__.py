"""Version 1 API routes."""

from fastapi import APIRouter

from .auth_routes import router as auth_router
from .branch_routes import router as branch_router
from .class_routes import router as class_router
from .class_subscription_routes import router as class_subscription_router
from .payment_routes import router as payment_router
from .product_routes import router as product_router
from .reservation_routes import router as reservation_router
from .role_routes import router as role_router
from .schedule_routes import router as schedule_router
from .user_membership_routes import router as user_membership_router
from .user_routes import router as user_router

router = APIRouter()
router.include_router(auth_router)
router.include_router(branch_router)
router.include_router(role_router)
router.include_router(user_router)
router.include_router(class_router)
router.include_router(schedule_router)
router.include_router(reservation_router)
router.include_router(class_subscription_router)
router.include_router(product_router)
router.include_router(payment_router)
router.include_router(user_membership_router)

__all__ = ["router"]
