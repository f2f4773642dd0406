"""
SimpananKu - personal note storage client
"""

__version__ = "1.0.0"
