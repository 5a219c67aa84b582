"""
ct-tools - pattern launcher and Apple data sync for CommonTools patterns.
"""

__version__ = "0.3.0"
