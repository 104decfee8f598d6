"""
Calendar Domain

Google Calendar access on behalf of individual users: credential lifecycle
(refresh before expiry, reactive refresh on 401) and event operations.
"""
