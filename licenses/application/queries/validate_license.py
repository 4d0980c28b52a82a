"""
ValidateLicenseQuery.

Query to check whether a (plugin, key) pair is currently entitled.
"""
from dataclasses import dataclass


@dataclass
class ValidateLicenseQuery:
    """Query to validate a license key for a plugin."""

    plugin_slug: str
    license_key: str
