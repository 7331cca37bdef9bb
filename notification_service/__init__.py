"""Multi-channel notification dispatch engine.

Fans a single business event out to email, SMS and WhatsApp with
per-channel templates, priorities, delays, quiet hours and retries.
"""

__version__ = "0.1.0"
