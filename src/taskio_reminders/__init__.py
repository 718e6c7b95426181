"""Overdue-task reminder scheduler for Taskio."""

__version__ = "0.1.0"
