from .detect import detect_format
from .docx_text import extract_docx_text, scan_docx_text
from .models import DocumentFormat, ParsedDoc, RawDocument
from .parse import parse_document
from .pdf_text import extract_pdf_text, scan_pdf_text

__all__ = [
    "DocumentFormat",
    "ParsedDoc",
    "RawDocument",
    "detect_format",
    "extract_docx_text",
    "extract_pdf_text",
    "parse_document",
    "scan_docx_text",
    "scan_pdf_text",
]
