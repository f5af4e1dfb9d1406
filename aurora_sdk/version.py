"""
Version helpers for the Aurora engine Python SDK.
"""

from __future__ import annotations

# Bump this when publishing
__version__ = "0.1.0"


def user_agent() -> str:
    """Default HTTP User-Agent sent to the host RPC node."""
    return f"aurora-sdk-py/{__version__}"


__all__ = ["__version__", "user_agent"]
