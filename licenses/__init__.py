"""
Licenses module - License management.

This module handles:
- License entity and domain logic
- License state machine driven by payment events
- License key generation
- License validation
"""
