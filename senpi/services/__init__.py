"""Service layer helpers"""

from .portfolio import Portfolio, PortfolioService, TokenBalance

__all__ = [
    "Portfolio",
    "PortfolioService",
    "TokenBalance",
]
