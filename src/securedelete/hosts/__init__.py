"""Secure Delete host adapters.

All hosts should inherit from BaseHost and implement the required methods.
"""
from .base import BaseHost, ResolvedElement
from .memory import InMemoryHost, load_selection_file
from .revit import RevitDeleteInterceptor, RevitHost

__all__ = [
    'BaseHost',
    'ResolvedElement',
    'InMemoryHost',
    'load_selection_file',
    'RevitHost',
    'RevitDeleteInterceptor',
]
