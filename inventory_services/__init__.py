"""
inventory_services -- in-process services with no database session.

Responsibility:
    Stateful helpers that sit beside the kernel and modules and are wired
    in by the hosting application (request throttling).

Architecture position:
    Services.  May import from inventory_kernel and inventory_config.
    inventory_kernel and inventory_engines must never import from here.
"""

from inventory_services.rate_limiter import SlidingWindowRateLimiter

__all__ = ["SlidingWindowRateLimiter"]
