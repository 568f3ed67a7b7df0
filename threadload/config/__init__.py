"""Configuration module for thread load monitoring."""

from .monitor_config import MonitorConfig

__all__ = ["MonitorConfig"]
