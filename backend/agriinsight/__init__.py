"""AgriInsight: agricultural dashboard API with cookie-based sessions."""

__version__ = "0.1.0"
