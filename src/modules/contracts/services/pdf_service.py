import base64
import io
import logging
import re
from datetime import datetime
from typing import Optional

from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from config import settings
from modules.contracts.models.contract import Contract
from modules.contracts.services.template_renderer import format_currency, format_date

logger = logging.getLogger(__name__)

MARGIN = 54
LINE_HEIGHT = 14
BODY_FONT = ("Helvetica", 10)
SIGNATURE_SIZE = (180, 60)


def _signature_reader(data_uri: Optional[str]) -> Optional[ImageReader]:
    if not data_uri or "," not in data_uri:
        return None
    payload = data_uri.split(",", 1)[1]
    return ImageReader(io.BytesIO(base64.b64decode(payload)))


def signed_contract_filename(contract: Contract, when: Optional[datetime] = None) -> str:
    when = when or contract.guest_signed_at or datetime.utcnow()
    project = re.sub(r"[^a-zA-Z0-9]", "_", contract.project_name or "") or "Contract"
    return f"Signed_Contract_{project}_{when:%Y-%m-%d}.pdf"


class _PageWriter:
    """Keeps track of the cursor and starts new pages as text flows."""

    def __init__(self, pdf: canvas.Canvas):
        self.pdf = pdf
        self.width, self.height = letter
        self.y = self.height - MARGIN

    def ensure_space(self, needed: float):
        if self.y - needed < MARGIN:
            self.pdf.showPage()
            self.y = self.height - MARGIN

    def line(self, text: str, font=BODY_FONT):
        self.ensure_space(LINE_HEIGHT)
        self.pdf.setFont(*font)
        self.pdf.drawString(MARGIN, self.y, text)
        self.y -= LINE_HEIGHT

    def paragraph(self, text: str, font=BODY_FONT):
        max_width = self.width - 2 * MARGIN
        for raw_line in (text or "").splitlines() or [""]:
            wrapped = simpleSplit(raw_line, font[0], font[1], max_width) or [""]
            for piece in wrapped:
                self.line(piece, font)

    def gap(self, size: float = LINE_HEIGHT):
        self.y -= size

    def signature(self, label: str, reader: Optional[ImageReader], name: str, signed_at: Optional[datetime]):
        self.ensure_space(SIGNATURE_SIZE[1] + 3 * LINE_HEIGHT)
        self.line(label, ("Helvetica-Bold", 10))
        if reader is not None:
            self.pdf.drawImage(
                reader, MARGIN, self.y - SIGNATURE_SIZE[1],
                width=SIGNATURE_SIZE[0], height=SIGNATURE_SIZE[1],
                preserveAspectRatio=True, mask="auto"
            )
        self.y -= SIGNATURE_SIZE[1] + 4
        self.line(name or "")
        if signed_at is not None:
            self.line(f"Signed: {signed_at:%Y-%m-%d %H:%M} UTC")
        self.gap()


def generate_signed_contract_pdf(contract: Contract) -> bytes:
    """Frozen contract text followed by both signatures."""
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=letter)
    pdf.setTitle(f"Contract - {contract.project_name}")
    writer = _PageWriter(pdf)

    writer.line(settings.COMPANY_NAME, ("Helvetica-Bold", 16))
    writer.line(f"Contract: {contract.project_name}", ("Helvetica-Bold", 12))
    writer.line(f"Contract ID: {contract.id}")
    writer.line(f"Total Amount: {format_currency(contract.total_amount)}")
    if contract.start_date:
        writer.line(f"Start Date: {format_date(contract.start_date)}")
    if contract.end_date:
        writer.line(f"End Date: {format_date(contract.end_date)}")
    writer.gap()

    writer.paragraph(contract.contract_content)
    writer.gap()

    writer.signature(
        "Contractor signature",
        _signature_reader(contract.admin_signature),
        contract.admin.name if contract.admin is not None else settings.COMPANY_NAME,
        contract.admin_signed_at,
    )
    writer.signature(
        "Client signature",
        _signature_reader(contract.guest_signature),
        contract.signed_name or contract.guest_name,
        contract.guest_signed_at,
    )

    pdf.showPage()
    pdf.save()
    logger.info("Generated signed PDF for contract %s", contract.id)
    return buffer.getvalue()
