# API Routes Module
from amy.api.routes import (
    ai,
    subscriptions,
    user_settings,
    webhooks,
)

__all__ = [
    "ai",
    "subscriptions",
    "user_settings",
    "webhooks",
]
