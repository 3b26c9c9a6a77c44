from abc import ABC, abstractmethod
from typing import Any, Dict


class ExtractionClient(ABC):
    """
    Base class for remote table-extraction services.

    A client sends one document (as base64 text plus its media type)
    together with an instruction and a JSON schema, and returns the
    service's raw text answer.  Validating that answer is the caller's job.

    Implementations raise ``errors.TransportError`` for any failure to
    obtain an answer.
    """

    @abstractmethod
    def send(
        self,
        instruction: str,
        payload: str,
        media_type: str,
        schema: Dict[str, Any],
    ) -> str:
        """Send the document and instruction; return the raw response text."""
        ...
