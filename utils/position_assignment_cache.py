"""
Service-layer caching for position assignment calculations.

The optimizer re-runs position assignment for both affected teams on every
candidate swap, and the same member/quota combinations come up again and
again. Caching the claim plan keeps that cheap while the domain function
stays pure.

Thread-safety: Uses a lock so concurrent balancing calls share the cache safely.
"""

import threading
from functools import lru_cache

# Lock to protect cache operations during parallel execution
_cache_lock = threading.Lock()

PreferenceKey = tuple[tuple[str, ...], tuple[str, ...], tuple[str, ...]]
QuotaKey = tuple[tuple[str, int], ...]


@lru_cache(maxsize=4096)
def _compute_cached_position_plan(
    preference_keys: tuple[PreferenceKey, ...],
    quota_key: QuotaKey,
) -> tuple[str | None, ...]:
    """
    Internal cached computation. Protected by _cache_lock in public wrapper.
    """
    # Import here to avoid circular import at module level
    from domain.services.position_assignment_service import compute_position_plan

    return compute_position_plan(preference_keys, quota_key)


def get_cached_position_plan(
    preference_keys: tuple[PreferenceKey, ...],
    quota_key: QuotaKey,
) -> tuple[str | None, ...]:
    """
    Compute and cache the quota claim plan for a team.

    Args:
        preference_keys: Per-member (primary, secondary, tertiary) tuples, in team order
        quota_key: Numeric quota items as (position, count) pairs, in quota map order

    Returns:
        Claimed position per member, or None for members left unclaimed
    """
    with _cache_lock:
        return _compute_cached_position_plan(preference_keys, quota_key)


def clear_position_assignment_cache() -> None:
    """Clear the position assignment cache. Useful for testing."""
    with _cache_lock:
        _compute_cached_position_plan.cache_clear()


def get_cache_info():
    """Get cache statistics. Useful for monitoring/debugging."""
    with _cache_lock:
        return _compute_cached_position_plan.cache_info()
