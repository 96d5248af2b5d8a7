"""
Reporting and output formatting
"""

from .console import ConsoleReporter

__all__ = ["ConsoleReporter"]
