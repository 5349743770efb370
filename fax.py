"""
Fax documents for refill/consultation requests

Renders a request as plain text or as a letter-size PDF and sends PDFs to a
fax line through the Documo API.
"""

import io
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from html import escape
from typing import Any, Dict, List, Optional

import httpx
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer

import config
from formatting import (
    digits_only,
    format_clock,
    format_long_date,
    format_phone_display,
    parse_datetime,
    service_display_name,
    to_local,
)

logger = logging.getLogger(__name__)

DOCUMO_API_URL = "https://api.documo.com/v1/fax/send"

REQUIRED_FIELDS = ("id", "type", "phone")


class FaxDocumentError(ValueError):
    """Raised when a stored request cannot be rendered"""


@dataclass
class FaxResult:
    success: bool
    fax_id: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None


def format_fax_number(phone: str) -> str:
    """Normalise to the digits Documo expects, e.g. 14506385760."""
    digits = digits_only(phone)
    if len(digits) == 11 and digits[0] == "1":
        return digits
    if len(digits) == 10:
        return f"1{digits}"
    return digits


def word_wrap(text: str, max_length: int, indent: str = "  ") -> str:
    lines: List[str] = []
    current = ""
    for word in text.split():
        if not current:
            current = indent + word
        elif len(current) + 1 + len(word) <= max_length:
            current += " " + word
        else:
            lines.append(current)
            current = indent + word
    if current:
        lines.append(current)
    return "".join(line + "\n" for line in lines)


def prepare_request(request: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a stored request and normalise createdAt to a local datetime."""
    missing = [f for f in REQUIRED_FIELDS if not request.get(f)]
    if missing:
        raise FaxDocumentError(f"Missing required fields: {', '.join(missing)}")

    prepared = dict(request)
    created = parse_datetime(request.get("createdAt")) or datetime.now(timezone.utc)
    prepared["createdAt"] = to_local(created, config.PHARMACY_TIMEZONE)
    return prepared


def _sections(request: Dict[str, Any]) -> List[tuple]:
    """
    Content shared by the text and PDF renditions.

    Returns (heading, [lines], wrapped_text) tuples; wrapped_text is free text
    that the renderer lays out itself.
    """
    is_refill = request["type"] == "refill"
    created: datetime = request["createdAt"]
    patient_phone = format_phone_display(request["phone"])

    sections = [
        (
            "REQUEST INFORMATION",
            [
                f"Request ID:        {request['id']}",
                f"Date Submitted:    {format_long_date(created)}",
                f"Time Submitted:    {format_clock(created)}",
                f"Patient Phone:     {patient_phone}",
                f"Request Type:      {'Prescription Refill' if is_refill else 'Consultation'}",
            ],
            None,
        )
    ]
    if request.get("name"):
        sections[0][1].insert(1, f"Patient Name:      {request['name']}")

    if is_refill:
        prescriptions = [rx.strip() for rx in request.get("prescriptions") or [] if rx and rx.strip()]
        rx_lines = [f"{i}. {rx}" for i, rx in enumerate(prescriptions, start=1)] or ["No prescriptions specified."]
        sections.append(("PRESCRIPTION DETAILS", rx_lines, None))

        delivery_type = request.get("deliveryType") or "Not specified"
        delivery = [f"Delivery Type:     {delivery_type[:1].upper() + delivery_type[1:]}"]
        if request.get("estimatedTime"):
            delivery.append(f"Estimated Time:    {request['estimatedTime']}")
        preferred_date = parse_datetime(request.get("preferredDate"))
        if preferred_date:
            delivery.append(f"Preferred Date:    {format_long_date(preferred_date)}")
        if request.get("preferredTime"):
            delivery.append(f"Preferred Time:    {request['preferredTime']}")
        sections.append(("DELIVERY INFORMATION", delivery, None))

        if (request.get("comments") or "").strip():
            sections.append(("ADDITIONAL COMMENTS", [], request["comments"].strip()))
    else:
        sections.append(
            ("CONSULTATION DETAILS", [f"Service Requested: {service_display_name(request.get('service'))}"], None)
        )

        raw_preferred = request.get("preferredDateTime")
        if raw_preferred:
            preferred = parse_datetime(raw_preferred)
            if preferred:
                lines = [f"Date: {format_long_date(preferred)}", f"Time: {format_clock(preferred)}"]
            else:
                lines = [str(raw_preferred)]
            sections.append(("PREFERRED APPOINTMENT TIME", lines, None))

        if (request.get("additionalNote") or "").strip():
            sections.append(("ADDITIONAL NOTES", [], request["additionalNote"].strip()))

    sections.append(
        (
            "ACTION REQUIRED",
            [
                f"This is an automated request submitted through the {config.PHARMACY_NAME} website.",
                f"Please contact the patient at {patient_phone} to proceed with this request.",
            ],
            None,
        )
    )
    sections.append(
        (
            "CONTACT INFORMATION",
            [config.PHARMACY_NAME, f"Phone: {config.PHARMACY_PHONE}", f"Fax: {config.PHARMACY_FAX_NUMBER}"],
            None,
        )
    )
    return sections


def _title(request: Dict[str, Any]) -> str:
    return "PRESCRIPTION REFILL REQUEST" if request["type"] == "refill" else "CONSULTATION REQUEST"


def generate_fax_document(request: Dict[str, Any]) -> str:
    """Plain-text rendition of a request (used as the fax cover notes)."""
    request = prepare_request(request)
    rule = "═" * 80 + "\n"

    out = "\n\n"
    out += " " * 15 + "═" * 70 + "\n"
    out += " " * 40 + config.PHARMACY_NAME.upper() + "\n"
    out += " " * 35 + "Professional Healthcare Services\n"
    out += " " * 15 + "═" * 70 + "\n\n"
    out += " " * 20 + "─" * 60 + "\n"
    out += " " * 35 + _title(request) + "\n"
    out += " " * 20 + "─" * 60 + "\n\n"

    for heading, lines, free_text in _sections(request):
        out += heading + "\n" + rule
        for line in lines:
            out += f"  {line}\n"
        if free_text:
            out += word_wrap(free_text, 70)
        out += "\n"

    return out + "\n"


def generate_fax_pdf(request: Dict[str, Any]) -> bytes:
    """Letter-size PDF rendition of a request."""
    request = prepare_request(request)
    logger.info(f"📄 Generating fax PDF for request {request['id']}")

    brand = colors.HexColor("#0A438C")
    styles = getSampleStyleSheet()
    header_style = ParagraphStyle("Header", parent=styles["Title"], fontSize=20, textColor=brand, spaceAfter=4)
    tagline_style = ParagraphStyle(
        "Tagline", parent=styles["Normal"], fontSize=11, textColor=colors.HexColor("#666666"), alignment=TA_CENTER
    )
    title_style = ParagraphStyle("DocTitle", parent=styles["Heading2"], fontSize=16, alignment=TA_CENTER)
    section_style = ParagraphStyle(
        "Section", parent=styles["Heading4"], fontSize=11, textColor=brand, spaceBefore=10, spaceAfter=4
    )
    body_style = ParagraphStyle("Body", parent=styles["Normal"], fontName="Courier", fontSize=10, leading=13)
    text_style = ParagraphStyle("Text", parent=styles["Normal"], fontSize=10, leading=13)

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=letter,
        leftMargin=50,
        rightMargin=50,
        topMargin=50,
        bottomMargin=50,
        title=f"Request {request['id']}",
    )

    story = [
        Paragraph(escape(config.PHARMACY_NAME.upper()), header_style),
        Paragraph("Professional Healthcare Services", tagline_style),
        Spacer(1, 12),
        HRFlowable(width="100%", thickness=2, color=brand),
        Spacer(1, 10),
        Paragraph(f"<u>{_title(request)}</u>", title_style),
        Spacer(1, 10),
    ]

    for heading, lines, free_text in _sections(request):
        if heading == "ACTION REQUIRED":
            story.append(Spacer(1, 6))
            story.append(HRFlowable(width="100%", thickness=1, color=brand))
        story.append(Paragraph(f"<u>{heading}</u>", section_style))
        for line in lines:
            story.append(Paragraph(escape(line).replace("  ", "&nbsp;&nbsp;"), body_style))
        if free_text:
            story.append(Paragraph(escape(free_text), text_style))

    doc.build(story)
    return buffer.getvalue()


def send_fax(
    recipient_fax: str,
    subject: str,
    recipient_name: str = "Recipient",
    notes: str = "",
    files: Optional[List[Dict[str, Any]]] = None,
) -> FaxResult:
    """
    Send a fax through Documo.

    files: [{"filename": str, "content": bytes | str, "content_type": str}]
    Never raises; failures are reported in the returned FaxResult.
    """
    if not config.DOCUMO_API_KEY:
        logger.error("DOCUMO_API_KEY is not configured")
        return FaxResult(success=False, error="Fax service not configured: DOCUMO_API_KEY is missing")

    if not recipient_fax:
        return FaxResult(success=False, error="Recipient fax number is required")

    data = {
        "recipientFax": format_fax_number(recipient_fax),
        "recipientName": recipient_name or "Recipient",
        "subject": subject,
        "notes": notes or "",
    }
    upload = []
    for f in files or []:
        content = f["content"]
        if isinstance(content, str):
            content = content.encode("utf-8")
        upload.append(("files", (f["filename"], content, f.get("content_type", "application/pdf"))))

    try:
        response = httpx.post(
            DOCUMO_API_URL,
            data=data,
            files=upload or None,
            headers={"Authorization": f"Basic {config.DOCUMO_API_KEY}"},
            timeout=60.0,
        )
        response.raise_for_status()
        body = response.json() if response.content else {}
    except httpx.HTTPStatusError as e:
        try:
            message = e.response.json().get("message") or str(e)
        except ValueError:
            message = str(e)
        logger.error(f"❌ Failed to send fax: {message}")
        return FaxResult(success=False, error=f"Documo API error: {message}")
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"❌ Failed to send fax: {e}")
        return FaxResult(success=False, error=f"Documo API error: {e}")

    fax_id = body.get("faxId") or body.get("id")
    logger.info(f"✅ Fax queued with Documo: {fax_id}")
    return FaxResult(success=True, fax_id=fax_id, message=body.get("message") or "Fax sent successfully")


def fax_request(request: Dict[str, Any], recipient_fax: Optional[str] = None, recipient_name: Optional[str] = None) -> FaxResult:
    """Render a request and fax it (defaults to the pharmacy's own fax line)."""
    try:
        pdf = generate_fax_pdf(request)
        notes = generate_fax_document(request)
    except FaxDocumentError as e:
        return FaxResult(success=False, error=str(e))

    kind = "Refill" if request.get("type") == "refill" else "Consultation"
    return send_fax(
        recipient_fax=recipient_fax or config.PHARMACY_FAX_NUMBER,
        recipient_name=recipient_name or config.PHARMACY_NAME,
        subject=f"{kind} Request {request['id']}",
        notes=notes,
        files=[{"filename": f"request-{request['id']}.pdf", "content": pdf, "content_type": "application/pdf"}],
    )


def fax_request_in_background(request: Dict[str, Any]) -> None:
    result = fax_request(request)
    if not result.success:
        logger.error(f"❌ Automatic fax for request {request.get('id')} failed: {result.error}")
