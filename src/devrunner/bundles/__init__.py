"""
Bundle discovery for the devrunner package.
"""

from .discovery import BundleDiscovery

__all__ = [
    "BundleDiscovery",
]
