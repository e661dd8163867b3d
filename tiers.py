# tiers.py
"""
Entitlement checks: premium status and the free-tier monthly quota.

Storage errors never block reminder creation. A failed read means
"not premium" for entitlement and "not exceeded" for the quota.
"""
import logging
from dataclasses import dataclass

import config
from database import utc_now

logger = logging.getLogger(__name__)

UNLIMITED = -1
USAGE_MONTHS_KEPT = 3  # current month + 2 prior


@dataclass
class MonthlyLimit:
    exceeded: bool
    count: int
    limit: int


def month_key(now):
    """Calendar month in UTC, e.g. '2026-10'."""
    return f"{now.year:04d}-{now.month:02d}"


def trailing_month_keys(now, months=USAGE_MONTHS_KEPT):
    year, month = now.year, now.month
    keys = []
    for _ in range(months):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    return keys


def user_is_premium(user, now):
    if user is None:
        return False
    if user.is_whitelisted:
        return True
    active = user.subscription_status == "active" or user.subscription_plan == "premium"
    if active and user.subscription_ends_at is not None:
        return user.subscription_ends_at > now
    return active


class TierResolver:
    def __init__(self, repository, limit=None, now=utc_now):
        self.repository = repository
        self.limit = limit if limit is not None else config.FREE_MONTHLY_LIMIT
        self.now = now

    async def is_premium(self, user_id):
        try:
            user = await self.repository.get_user(user_id)
        except Exception as e:
            logger.error(f"Error checking premium status for {user_id}: {e}")
            return False
        return user_is_premium(user, self.now())

    async def check_monthly_limit(self, user_id):
        try:
            user = await self.repository.get_user(user_id)
        except Exception as e:
            logger.error(f"Error checking monthly limit for {user_id}: {e}")
            return MonthlyLimit(exceeded=False, count=0, limit=self.limit)
        now = self.now()
        count = int((user.monthly_reminder_usage or {}).get(month_key(now), 0)) if user else 0
        if user_is_premium(user, now):
            return MonthlyLimit(exceeded=False, count=count, limit=UNLIMITED)
        return MonthlyLimit(exceeded=count >= self.limit, count=count, limit=self.limit)

    async def increment_monthly_count(self, user_id, by=1):
        # Read-modify-write without a lock: concurrent creations can under-count.
        try:
            user = await self.repository.get_user(user_id)
            now = self.now()
            if user is None or user_is_premium(user, now):
                return
            keep = trailing_month_keys(now)
            usage = {k: v for k, v in (user.monthly_reminder_usage or {}).items() if k in keep}
            key = month_key(now)
            usage[key] = int(usage.get(key, 0)) + by
            await self.repository.update_user(user_id, {"monthly_reminder_usage": usage})
        except Exception as e:
            logger.error(f"Error updating monthly usage for {user_id}: {e}")

    async def assign_whitelist(self, user):
        """Login-time assignment of the whitelist flag from the admin-managed list."""
        whitelisted = await self.repository.is_whitelisted(user.email)
        if bool(user.is_whitelisted) != whitelisted:
            user = await self.repository.update_user(user.id, {"is_whitelisted": whitelisted})
        return user
