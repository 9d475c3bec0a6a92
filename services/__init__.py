"""
Application services layer.

Services validate caller input and orchestrate the balancer and domain services.
"""

from services.balance_service import BalanceService

# Result type for consistent error handling
from services.result import Result

__all__ = [
    "BalanceService",
    "Result",
]
