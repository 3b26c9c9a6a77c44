from ai.service import ExtractionClient
from ai.factory import get_extraction_client
from ai.response_parser import parse_llm_json

__all__ = [
    "ExtractionClient",
    "get_extraction_client",
    "parse_llm_json",
]
