"""
Root conftest.py - Global configuration for all test layers.

Test Layers:
    - component/  : OrderService and OrderRepository with mocked dependencies
    - unit/       : Pure logic, clients and core helpers (no real I/O)
"""
import os
import sys

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

os.environ.setdefault("ENV", "testing")
os.environ.setdefault("NATS_ENABLED", "false")
