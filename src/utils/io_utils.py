"""IO and small helpers: docx export, filename sanitization, and streamlit error handler."""
import io
import logging
import re

import pandas as pd
import streamlit as st
from docx import Document

from src.services.errors import AuthorizationError, DuplicateError, InvalidTransitionError, NotFoundError

logger = logging.getLogger(__name__)

ACCESSIBILITY_LABELS = {
    "wheelchair": "Wheelchair access",
    "parking": "Parking",
    "elevator": "Elevator",
    "ramp": "Ramp",
    "accessible_restroom": "Accessible restroom",
    "braille": "Braille signage",
    "sign_language": "Sign language",
}


def format_phone_number(phone):
    """
    Normalize a phone number for display: collapse whitespace and keep the
    leading ``+``. Returns None for missing values.

    Args:
        phone: Phone number as string (or number from a spreadsheet)

    Returns:
        Formatted phone string or None
    """
    if phone is None or (not isinstance(phone, str) and pd.isna(phone)):
        return None
    if isinstance(phone, float) and phone.is_integer():
        phone = int(phone)
    text = re.sub(r"\s+", " ", str(phone)).strip()
    return text or None


def format_accessibility(features) -> str:
    return ", ".join(ACCESSIBILITY_LABELS.get(f, f) for f in features or [])


def get_provider_card_bytes(provider) -> bytes:
    """Contact sheet for one provider as a .docx document."""
    doc = Document()
    doc.add_heading(provider.business_name, 0)
    subtitle = provider.provider_type.title()
    if provider.specialty:
        subtitle = f"{subtitle} - {provider.specialty}"
    doc.add_paragraph(subtitle)
    if provider.verification_status == "verified":
        doc.add_paragraph("Verified provider")
    doc.add_paragraph(f"Address: {provider.address}")
    phone = format_phone_number(provider.phone)
    if phone:
        doc.add_paragraph(f"Phone: {phone}")
    if provider.email:
        doc.add_paragraph(f"Email: {provider.email}")
    if provider.website:
        doc.add_paragraph(f"Website: {provider.website}")
    if provider.is_emergency:
        doc.add_paragraph("Emergency services available")
    if provider.home_visit_available:
        doc.add_paragraph("Home visits available")
    if provider.accessibility_features:
        doc.add_paragraph(f"Accessibility: {format_accessibility(provider.accessibility_features)}")
    if provider.description:
        doc.add_paragraph(provider.description)
    buffer = io.BytesIO()
    doc.save(buffer)
    buffer.seek(0)
    return buffer.getvalue()


def sanitize_filename(name: str) -> str:
    return re.sub(r"[^A-Za-z0-9_]", "", name.replace(" ", "_"))


def handle_streamlit_error(error: Exception, context: str = "operation") -> None:
    err = str(error)
    logger.error(f"Error during {context}: {err}")
    if isinstance(error, AuthorizationError):
        st.error(f"🔒 **Not allowed**: {err}")
    elif isinstance(error, NotFoundError):
        st.error(f"❌ **Not found**: {err}")
    elif isinstance(error, (DuplicateError, InvalidTransitionError)):
        st.warning(f"⚠️ {err}")
    elif isinstance(error, ValueError):
        st.error(f"❌ **Invalid input**: {err}")
    elif "network" in err.lower() or "connection" in err.lower():
        st.error("❌ **Network Error**: Unable to reach the storage service. Please check your internet connection.")
    elif "timeout" in err.lower():
        st.error("❌ **Timeout Error**: The storage service is taking too long to respond. Please try again.")
    else:
        st.error(f"❌ **Error during {context}**: {err}")
        st.exception(error)
