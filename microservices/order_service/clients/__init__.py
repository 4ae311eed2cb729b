"""
Order Service Clients Module

HTTP clients for services the order engine depends on.
"""

from .product_client import ProductClient

__all__ = ["ProductClient"]
