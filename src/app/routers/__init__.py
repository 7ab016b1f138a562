# Routers package
from . import (
    dodo_router,
    subscription_router,
)

__all__ = [
    "dodo_router",
    "subscription_router",
]
