"""Charm access through the ct tool."""

from .client import CharmClient

__all__ = ['CharmClient']
