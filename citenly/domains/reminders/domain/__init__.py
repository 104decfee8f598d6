"""Reminders domain layer: entities, value objects and pure services."""
