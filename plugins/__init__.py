"""
Plugins module - Plugin catalog references.

This module handles:
- Plugin entity (slug, processor price references, checkout settings)
- Plugin lookups used by license validation, checkout and event ingestion

Plugins are created and edited by administrators; this service only reads them.
"""
