"""API Routers package"""

from . import streamers_router

__all__ = ["streamers_router"]
