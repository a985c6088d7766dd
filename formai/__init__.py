"""formai -- AI provider orchestration for document OCR and analysis."""

__version__ = "0.1.0"
