"""Secure Delete: review and authorization gate for host delete commands."""

__version__ = "0.1.0"
