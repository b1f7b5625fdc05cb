"""Database module."""

from db.cosmos_session import close_cosmos, get_container, is_cosmos_configured

__all__ = ["get_container", "is_cosmos_configured", "close_cosmos"]
