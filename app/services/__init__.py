"""
                        Services Module

External collaborators behind the route layer, each with a development
implementation and a production one selected by ENV_MODE.

Services:
    - store: document store (in-memory / MongoDB)
    - payment: payment intents (mock / Stripe)
"""

from app.services.payment import create_payment_service
from app.services.store import create_store

__all__ = ["create_payment_service", "create_store"]
