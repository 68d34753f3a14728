"""
Service Layer - Monitor and Handle.
"""

from buildfiles.services.monitor import Handle, Interrupt, Monitor

__all__ = [
    "Monitor",
    "Handle",
    "Interrupt",
]
