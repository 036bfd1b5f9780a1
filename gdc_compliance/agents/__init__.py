from .base_agent import BaseExtractionAgent, ExtractionError
from .llm_extraction_agent import LLMExtractionAgent
from .response_parser import (
    ParsedFields,
    ResponseParseError,
    infer_status_from_keywords,
    parse_response,
    parse_structured_response,
)
from .template_extraction_agent import TemplateExtractionAgent

__all__ = [
    "BaseExtractionAgent",
    "ExtractionError",
    "LLMExtractionAgent",
    "ParsedFields",
    "ResponseParseError",
    "TemplateExtractionAgent",
    "infer_status_from_keywords",
    "parse_response",
    "parse_structured_response",
]
