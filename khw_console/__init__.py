"""
KHW Console comparison core
Similar manual search controller and manual text/version comparison engine
"""

__version__ = "0.1.0"
