"""
Approximate call graphs for Perl scripts and modules
"""

__version__ = "0.1.0"
