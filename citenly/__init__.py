"""
Citenly reminder engine.

Multi-tenant appointment reminders over WhatsApp and Google Calendar sync.
"""
