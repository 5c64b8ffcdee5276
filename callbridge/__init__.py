"""
callbridge: bridge between a UI process and the host's call log,
inbound share text and application launcher.
"""

__version__ = '1.0.0'
