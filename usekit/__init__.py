"""
usekit - declarative component activation for editor startup configuration
"""

__version__ = "0.3.0"
