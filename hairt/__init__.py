"""
hairt - Airthings latest-samples poller for a home-automation host.
"""

__version__ = '1.0.0'
