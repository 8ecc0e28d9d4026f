"""Route guard and navigation targets."""

from .guard import (
    AuthState,
    GuardAction,
    GuardDecision,
    RouteGuard,
    is_bypassed,
    is_safe_callback,
)
from .navigator import HistoryNavigator, Navigator

__all__ = [
    "AuthState",
    "GuardAction",
    "GuardDecision",
    "RouteGuard",
    "is_bypassed",
    "is_safe_callback",
    "HistoryNavigator",
    "Navigator",
]
