"""Cache key builders and TTL tiers.

Single place for cache key construction so unrelated call sites agree on
naming. Tiers are chosen by data volatility:

- STATIC (24h): condominiums, colonies, amenities, property features
- USER_SESSION (15min): user profiles, notifications, favorites
- QUERY_RESULT (10min): search results, featured listings, calendars
- SHORT (5min): dashboards and other frequently changing data
"""

import hashlib
import json
from typing import Any, Mapping


class CacheTTL:
    """TTL tiers in seconds."""
    STATIC = 24 * 60 * 60
    USER_SESSION = 15 * 60
    QUERY_RESULT = 10 * 60
    SHORT = 5 * 60


class CacheKeys:
    """Deterministic key builders; same inputs always give the same key."""

    # Tier 1: static data
    @staticmethod
    def condominiums_approved() -> str:
        return "condominiums:approved"

    @staticmethod
    def colonies_approved() -> str:
        return "colonies:approved"

    @staticmethod
    def amenities() -> str:
        return "amenities:all"

    @staticmethod
    def property_features() -> str:
        return "property-features:all"

    @staticmethod
    def business_hours() -> str:
        return "business-hours"

    # Tier 2: user session data
    @staticmethod
    def user_profile(user_id: str) -> str:
        return f"user:{user_id}:profile"

    @staticmethod
    def user_notifications_unread(user_id: str) -> str:
        return f"user:{user_id}:notifications:unread"

    @staticmethod
    def user_favorites(user_id: str) -> str:
        return f"user:{user_id}:favorites"

    @staticmethod
    def user_pattern(user_id: str) -> str:
        return f"user:{user_id}:*"

    # Tier 3: query results
    @staticmethod
    def property_search(filters_hash: str) -> str:
        return f"properties:search:{filters_hash}"

    @staticmethod
    def property_search_pattern() -> str:
        return "properties:search:*"

    @staticmethod
    def properties_featured() -> str:
        return "properties:featured"

    @staticmethod
    def appointments_calendar(date: str) -> str:
        return f"appointments:calendar:{date}"

    # Dashboards
    @staticmethod
    def external_dashboard_summary(agency_id: str) -> str:
        return f"external:dashboard:summary:{agency_id}"

    @staticmethod
    def external_seller_summary(user_id: str, agency_id: str) -> str:
        return f"external:seller:summary:{user_id}:{agency_id}"

    @staticmethod
    def external_seller_metrics(user_id: str, agency_id: str) -> str:
        return f"external:seller:metrics:{user_id}:{agency_id}"

    @staticmethod
    def external_seller_pattern(agency_id: str) -> str:
        return f"external:seller:*:{agency_id}"

    @staticmethod
    def public_properties(limit: int, offset: int, has_coordinates: bool = False) -> str:
        return f"public:properties:{limit}:{offset}:{'true' if has_coordinates else 'false'}"


def filters_hash(filters: Mapping[str, Any]) -> str:
    """Stable short digest of a search filter mapping.

    Key order does not matter; values must be JSON-serializable (others are
    stringified).
    """
    canonical = json.dumps(filters, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]
