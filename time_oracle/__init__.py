"""
Access-controlled millisecond timestamp oracle.
"""

__version__ = "0.1.0"
