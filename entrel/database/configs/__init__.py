#!/usr/bin/env python3
"""
Database configuration modules.

This package contains declarative configurations for database operations:
- host_area_configs: Registry of (component, area) host kinds and their tables
"""
from .host_area_configs import (
    DEFAULT_HOST_AREAS,
    HostAreaConfig,
    HostAreaRegistry,
    default_registry,
    load_host_area_configs,
)

__all__ = [
    "DEFAULT_HOST_AREAS",
    "HostAreaConfig",
    "HostAreaRegistry",
    "default_registry",
    "load_host_area_configs",
]
