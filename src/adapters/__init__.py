"""Adapters that connect the core ports to Outlook, Telegram and HTTP."""
