"""Small-business federal contract analytics: adaptive award queries and bid/no-bid decisions."""

__version__ = "0.1.0"
