"""
IngestPaymentEventCommand.

Command to apply one verified processor event to the license store.
"""
from dataclasses import dataclass

from payments.domain.processor_event import ProcessorEvent


@dataclass
class IngestPaymentEventCommand:
    """Command to ingest a verified payment event."""

    event: ProcessorEvent
