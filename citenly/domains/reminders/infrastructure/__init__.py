"""Reminders infrastructure layer: SQLAlchemy repositories and the hourly scheduler."""
