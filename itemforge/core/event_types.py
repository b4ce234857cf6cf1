"""Event type constants

Payloads carry identifiers and small scalars only, never item objects.
"""


class EventTypes:
    """Event type string constants"""

    # generation
    ITEM_GENERATED = "item_generated"
    AFFIX_POOL_EXHAUSTED = "affix_pool_exhausted"

    # cache
    CACHE_HIT = "cache_hit"
    CACHE_MISS = "cache_miss"
    POOL_WARMED = "pool_warmed"
    POOL_CLEARED = "pool_cleared"

    # host loop
    TICK_PROCESSED = "tick_processed"
