"""Ametrine: a small offline Minecraft launcher."""

__version__ = "0.1.0"
