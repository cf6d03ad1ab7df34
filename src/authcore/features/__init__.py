"""Feature modules for authcore.

Each feature keeps its entities, services and adapters together:
store, tokens, sessions, otp, governor, credentials, notifications.
"""
