"""Reminders application layer: use cases, ports and DTOs."""
