"""Maintenance scripts run with ``python -m equiptrack.scripts.<name>``."""
