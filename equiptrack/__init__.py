"""
Equipment Tracker API.

Asset registry, check-out/return movements and test-and-tag compliance
tracking on top of an async FastAPI + PostgreSQL stack.
"""

__version__ = "1.0.0"
