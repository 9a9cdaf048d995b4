from src.portal.services.access_gate import (
    AccessDecision,
    DenialReason,
    GateState,
    GuardConfig,
    RouteGuard,
    evaluate_access,
)
from src.portal.services.notification_service import NotificationService
from src.portal.services.promotion_service import (
    PromotionService,
    ProvisionResult,
    ReviewLocks,
    ReviewResult,
)
from src.portal.services.session_manager import SessionManager

__all__ = [
    "AccessDecision",
    "DenialReason",
    "GateState",
    "GuardConfig",
    "NotificationService",
    "PromotionService",
    "ProvisionResult",
    "ReviewLocks",
    "ReviewResult",
    "RouteGuard",
    "SessionManager",
    "evaluate_access",
]
