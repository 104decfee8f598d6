"""
Reminders Domain

Timezone-aware appointment reminders (24h / 2h / 1h tiers) and post-visit
follow-ups, sent through YCloud WhatsApp for every clinic on each hourly tick.
"""
