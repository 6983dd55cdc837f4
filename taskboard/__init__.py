"""taskboard: personal task tracking with role-based admin controls."""

__version__ = "0.1.0"
