"""
Conduit - a RealWorld content-sharing backend.
"""

__version__ = "1.0.0"
