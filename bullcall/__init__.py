"""Bull call spread analytics backed by Alpaca market data."""

__version__ = "0.1.0"
