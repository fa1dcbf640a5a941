"""Core domain package for relaybot.

Core contains command parsing, message normalization and update routing
without any Telegram or HTTP-specific code, keeping the relay logic portable.
"""
