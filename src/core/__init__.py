"""Core domain package for the Outlook notifier.

Core contains folder resolution, deduplication, session recovery and cycle
scheduling without any COM or Telegram-specific code, keeping the polling
logic testable with fakes.
"""
