"""Bounded contexts of the reminder engine."""
