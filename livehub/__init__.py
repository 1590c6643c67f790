"""
Live Hub: live-event control panel backend
"""

__version__ = "1.0.0"
