"""
EntroScan Shared Module
=======================

Common utilities, models, and configuration management shared across
the EntroScan toolkit.
"""

from shared.config import EntroScanConfig, get_config

__all__ = ["EntroScanConfig", "get_config"]
