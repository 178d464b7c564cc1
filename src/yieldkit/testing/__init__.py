"""Test utilities for yieldkit applications::

    from yieldkit.testing import TestClient
"""

from yieldkit.testing.client import TestClient

__all__ = ["TestClient"]
