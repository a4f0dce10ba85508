"""Route modules for the AgriInsight API."""
from . import auth, dashboard, health

__all__ = ["auth", "dashboard", "health"]
