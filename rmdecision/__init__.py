"""Maths, filters, referee-driven limits, command senders and a video transmission decoder for competition robots."""

__version__ = "0.1.0"