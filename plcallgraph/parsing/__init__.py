"""
Line-oriented scanning of Perl source files
"""

from .scanner import PerlScanner, ScanResult, ScanState, scan_line

__all__ = ["PerlScanner", "ScanResult", "ScanState", "scan_line"]
