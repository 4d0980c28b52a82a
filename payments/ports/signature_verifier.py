"""
Signature verifier port (interface).
"""
from abc import ABC, abstractmethod
from typing import Optional

from payments.domain.processor_event import ProcessorEvent


class SignatureVerifier(ABC):
    """Authenticates raw webhook bodies before anything reads them."""

    @abstractmethod
    def verify(self, payload: bytes, signature_header: Optional[str]) -> ProcessorEvent:
        """
        Verify and decode a webhook body.

        Args:
            payload: Raw request body, byte-exact
            signature_header: Signature header sent with the body

        Returns:
            Verified ProcessorEvent

        Raises:
            InvalidSignatureError: If the signature is missing, wrong or too old
            MalformedPayloadError: If the authenticated body is not an event
        """
        pass
