"""Prompts for the text-extraction service."""

from __future__ import annotations

from compliance_scout.models import documents

PRIVACY_MARKER = "PRIVACY POLICY:"
COOKIE_MARKER = "COOKIE POLICY:"

NO_DEDICATED_COOKIE_POLICY = "No dedicated cookie policy found"
NO_COOKIE_POLICY = "No cookie policy found"
NO_COOKIE_INFORMATION = "No cookie information found"

# Privacy text sent to the cookie-only prompts is capped separately
# from page content; these prompts only need the cookie sections.
COMBINED_COOKIE_FOLLOWUP_CHAR_LIMIT = 20_000
DERIVED_COOKIE_CHAR_LIMIT = 25_000


def not_found_sentinel(document_type: documents.DocumentType) -> str:
    """The exact reply the service is told to give when a document is absent."""
    return f"No {document_type.label} found on this page."


# ── Single document ─────────────────────────────────────────────


def document_system_prompt(document_type: documents.DocumentType) -> str:
    return (
        "You are a specialized content extractor for legal documents. "
        f"Your task is to extract the {document_type.label} content from text. "
        "Be thorough and extract only relevant content."
    )


def document_user_prompt(document_type: documents.DocumentType, text: str) -> str:
    label = document_type.label
    return f"""\
Extract the complete content of the {label} from this text.
Only extract the actual policy text, not navigation, headers, footers, or other website elements.
If you absolutely cannot find any content related to {label}, respond with "{not_found_sentinel(document_type)}"
Preserve the formatting and structure of the policy as much as possible.

Text content:
{text}"""


# ── Combined privacy + cookie page ──────────────────────────────

COMBINED_SYSTEM_PROMPT = (
    "You are an expert at extracting legal policy content from webpage text. "
    "Your job is to find and extract the complete text of privacy and cookie policies."
)


def combined_user_prompt(text: str) -> str:
    return f"""\
This is the text content from a webpage that contains a privacy policy and possibly a cookie policy.

Your task is to extract:
1. The complete privacy policy text
2. The complete cookie policy text (if present)

Important guidelines:
- Focus on identifying and extracting just the policy text
- Separate the privacy policy from the cookie policy
- If the cookie policy is part of the privacy policy, extract the cookie-related sections separately

Format your response using plain text markers as follows:

{PRIVACY_MARKER}
[Insert the complete privacy policy text here]

{COOKIE_MARKER}
[Insert the complete cookie policy text here OR "{NO_DEDICATED_COOKIE_POLICY}"]

Text content:
{text}"""


# ── Cookie sections from privacy text ───────────────────────────

COOKIE_SECTIONS_SYSTEM_PROMPT = "Extract only cookie-related information from text."


def cookie_sections_user_prompt(privacy_text: str) -> str:
    return (
        "Find and extract ONLY the sections about cookies, tracking technologies, "
        "or similar technologies in this privacy policy. If there are no cookie "
        f'sections, respond with "{NO_COOKIE_INFORMATION}".\n\n{privacy_text}'
    )
