#!/usr/bin/env python3
"""Order engine main configuration

Order-domain settings plus the combined engine config that groups the
infrastructure and logging sub-configs.
"""
import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from .infra_config import InfraConfig
from .logging_config import LoggingConfig


def _bool(val: str) -> bool:
    return val.lower() == "true"

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default

def _decimal(val: str, default: Decimal) -> Decimal:
    try:
        return Decimal(val) if val else default
    except InvalidOperation:
        return default


@dataclass
class OrderConfig:
    """Order domain settings"""
    default_currency: str = "CHF"

    # Pagination (max_page_size never exceeds 100)
    default_page_size: int = 20
    max_page_size: int = 100

    # Peer services
    product_service_url: str = "http://localhost:8215"
    http_timeout_seconds: float = 30.0

    # Events
    events_enabled: bool = False

    @classmethod
    def from_env(cls) -> 'OrderConfig':
        return cls(
            default_currency=os.getenv("ORDER_DEFAULT_CURRENCY", "CHF").upper(),
            default_page_size=_int(os.getenv("ORDER_DEFAULT_PAGE_SIZE", "20"), 20),
            max_page_size=min(_int(os.getenv("ORDER_MAX_PAGE_SIZE", "100"), 100), 100),
            product_service_url=os.getenv("PRODUCT_SERVICE_URL", "http://localhost:8215"),
            http_timeout_seconds=float(_decimal(os.getenv("HTTP_TIMEOUT_SECONDS", "30"), Decimal("30"))),
            events_enabled=_bool(os.getenv("NATS_ENABLED", "false")),
        )


@dataclass
class OrderEngineConfig:
    """Complete order engine configuration"""
    order: OrderConfig = field(default_factory=OrderConfig)
    infra: InfraConfig = field(default_factory=InfraConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    environment: str = "development"
    debug: bool = False

    @classmethod
    def from_env(cls) -> 'OrderEngineConfig':
        """Load complete configuration from environment"""
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        return cls(
            order=OrderConfig.from_env(),
            infra=InfraConfig.from_env(),
            logging=LoggingConfig.from_env(),
            environment=env,
            debug=_bool(os.getenv("DEBUG", "false")),
        )
