"""Staffing and confirmation tracking for catering events."""
