"""Utilities for data-exchange services: text, time, files, logging, TCP, FTP,
a ring queue, process heartbeats and surface weather observation files."""

__version__ = "1.0.0"