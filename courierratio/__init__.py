# file: courierratio/__init__.py
"""
courierratio - courier delivery history and fraud-risk checks for Bangladeshi
mobile numbers.

The package normalizes user-entered numbers, proxies the bdcourier API behind a
uniform error envelope, and classifies the returned delivery statistics into a
risk tier.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
