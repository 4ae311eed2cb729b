#!/usr/bin/env python3
"""
Core Module

Shared infrastructure for the order engine services.

COMPONENTS:
    - config/: Environment-driven dataclass configuration
    - logger.py: Service logger setup
    - postgres_client.py: asyncpg pool wrapper with explicit transactions
    - nats_client.py: NATS event bus for event-driven architecture

USAGE:
    from core.config import get_settings
    from core.logger import setup_service_logger

    settings = get_settings()
    logger = setup_service_logger("order_service")
"""

__version__ = "2.0.0"
