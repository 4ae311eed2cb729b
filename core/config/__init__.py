#!/usr/bin/env python3
"""Modular configuration system for the bullion order engine

Configuration hierarchy:
- infra_config: Infrastructure services (PostgreSQL, NATS)
- logging_config: Logging configuration
- order_config: Order domain settings and the combined engine config
"""
import os
from dotenv import load_dotenv
from .logging_config import LoggingConfig
from .infra_config import InfraConfig
from .order_config import OrderConfig, OrderEngineConfig

# Load environment file based on ENV
env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
env_files = {
    "development": "deployment/environments/dev.env",
    "dev": "deployment/environments/dev.env",
    "testing": "deployment/environments/test.env",
    "test": "deployment/environments/test.env",
    "staging": "deployment/environments/staging.env",
    "production": "deployment/environments/production.env",
}
env_file = env_files.get(env, "deployment/environments/dev.env")
load_dotenv(env_file, override=False)

# Create global settings instance
settings = OrderEngineConfig.from_env()

def get_settings() -> OrderEngineConfig:
    """Get global settings instance"""
    return settings

def reload_settings() -> OrderEngineConfig:
    """Reload settings from environment"""
    global settings
    settings = OrderEngineConfig.from_env()
    return settings

__all__ = [
    'OrderEngineConfig',
    'get_settings',
    'reload_settings',
    'settings',
    'LoggingConfig',
    'InfraConfig',
    'OrderConfig',
]
