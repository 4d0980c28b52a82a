"""
Payments module - Payment processor event ingestion.

This module handles:
- Signature verification of processor webhooks
- The applied-event deduplication ledger
- Turning verified events into license state transitions
- Checkout session initiation
"""
