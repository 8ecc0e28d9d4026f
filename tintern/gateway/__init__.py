"""
Authenticated request gateway.

Public API:
- ApiGateway: bearer-injecting, 401-aware request helper
- Success, AuthFailure, Failure, GatewayResult: typed call outcomes
"""

from .client import ApiGateway
from .results import AuthFailure, Failure, GatewayResult, Success

__all__ = ["ApiGateway", "AuthFailure", "Failure", "GatewayResult", "Success"]
