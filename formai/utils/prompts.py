"""Prompt templates shared by the AI provider adapters."""

from __future__ import annotations

OCR_PROMPT = (
    "Extract all text from this document image. Return only the extracted "
    "text with no additional formatting, explanations, or markdown. If there "
    'is no readable text, return "No text found".'
)

OCR_SYSTEM_PROMPT = (
    "Extract text from images accurately. Return only the extracted text "
    "with no additional formatting or explanations."
)

ANALYSIS_SYSTEM_PROMPT = (
    "You are an expert document analyzer. Extract information accurately and "
    "respond with ONLY valid JSON. No explanations, no markdown, no code "
    "blocks. Just pure, parseable JSON with proper syntax."
)

_ANALYSIS_TEMPLATE = """\
Analyze the following document text and extract structured information. \
Return ONLY valid JSON with no additional text, explanations, or markdown formatting.

Required JSON structure:
{{
  "document_type": "passport" | "visa" | "financial" | "personal" | "contract" | "other",
  "confidence": 0.85,
  "suggested_form": "visa_application" | "financial_declaration" | "personal_information",
  "extracted_data": {{
    "full_name": "string or empty string",
    "date_of_birth": "YYYY-MM-DD format or empty string",
    "nationality": "string or empty string",
    "passport_number": "string or empty string",
    "account_number": "string or empty string",
    "bank_name": "string or empty string",
    "balance": "string or empty string",
    "monthly_income": "string or empty string",
    "address": "string or empty string",
    "phone": "string or empty string",
    "email": "string or empty string",
    "occupation": "string or empty string"
  }}
}}

Rules:
- Include only fields that are clearly found in the document
- Use empty string "" for missing fields, never null
- Confidence must be between 0 and 1
- All dates in YYYY-MM-DD format
- No trailing commas
- Valid JSON only, no explanations

Document text:
{document_text}"""


def build_analysis_prompt(document_text: str) -> str:
    """Embed already-truncated *document_text* in the analysis instructions."""
    return _ANALYSIS_TEMPLATE.format(document_text=document_text)
