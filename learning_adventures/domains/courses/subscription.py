# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subscription tiers and premium access checks."""

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from learning_adventures.infrastructure.database.models import (
    Subscription,
    SubscriptionStatus,
    SubscriptionTier,
)
from learning_adventures.utils.datetime import utc_now

logger = logging.getLogger(__name__)

PREMIUM_FEATURES = [
    "Full course access",
    "Unlimited lessons",
    "Course certificates",
    "No advertisements",
    "Priority support",
    "Download lesson materials",
]

FREE_FEATURES = [
    "Access to free games",
    "First 2-3 lessons of premium courses",
    "Basic progress tracking",
    "Community features",
]


def subscription_features(tier: str) -> list[str]:
    if tier == SubscriptionTier.PREMIUM.value:
        return list(PREMIUM_FEATURES)
    return list(FREE_FEATURES)


def has_premium_access(subscription: Subscription | None) -> bool:
    """Premium access requires an ACTIVE PREMIUM subscription."""
    return (
        subscription is not None
        and subscription.tier == SubscriptionTier.PREMIUM.value
        and subscription.status == SubscriptionStatus.ACTIVE.value
    )


class SubscriptionService:
    """Reads and updates a user's subscription row."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_subscription(self, user_id: str) -> Subscription | None:
        result = await self.db.execute(
            select(Subscription).where(Subscription.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def has_premium_access(self, user_id: str) -> bool:
        return has_premium_access(await self.get_subscription(user_id))

    async def subscription_status(self, user_id: str) -> dict[str, Any]:
        """Current tier/status; users without a row are FREE and ACTIVE."""
        subscription = await self.get_subscription(user_id)
        tier = subscription.tier if subscription else SubscriptionTier.FREE.value
        status = subscription.status if subscription else SubscriptionStatus.ACTIVE.value

        return {
            "tier": tier,
            "status": status,
            "startDate": subscription.start_date.isoformat() if subscription else None,
            "endDate": (
                subscription.end_date.isoformat()
                if subscription and subscription.end_date
                else None
            ),
            "hasPremiumAccess": has_premium_access(subscription),
            "features": subscription_features(tier),
        }

    async def set_tier(self, user_id: str, tier: SubscriptionTier) -> Subscription:
        """Create or update the subscription with the given tier, reactivating it."""
        subscription = await self.get_subscription(user_id)
        if subscription is None:
            subscription = Subscription(
                user_id=user_id,
                tier=tier.value,
                status=SubscriptionStatus.ACTIVE.value,
                start_date=utc_now(),
            )
            self.db.add(subscription)
        else:
            subscription.tier = tier.value
            subscription.status = SubscriptionStatus.ACTIVE.value
            subscription.end_date = None

        await self.db.commit()
        await self.db.refresh(subscription)

        logger.info("Subscription set: user=%s, tier=%s", user_id, tier.value)
        return subscription

    async def cancel(self, user_id: str) -> Subscription | None:
        subscription = await self.get_subscription(user_id)
        if subscription is None:
            return None

        subscription.status = SubscriptionStatus.CANCELLED.value
        subscription.end_date = utc_now()
        await self.db.commit()
        await self.db.refresh(subscription)

        logger.info("Subscription cancelled: user=%s", user_id)
        return subscription
