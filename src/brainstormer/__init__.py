"""Brainstormer - circular reel engine and resilient catalog loader."""

__version__ = "0.1.0"
