"""ReportLab PDF Generation Service Implementation

Implements invoice PDF rendering using the ReportLab library.
"""

from io import BytesIO
from typing import List, Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import (
    SimpleDocTemplate,
    Table,
    TableStyle,
    Paragraph,
    Spacer,
)

from receivables.app.services.client_directory import ClientInfo
from receivables.app.services.pdf_service import PdfService
from receivables.domain.invoice import Invoice, InvoiceStatus
from receivables.domain.invoice_line import InvoiceLine, LineItemKind
from receivables.domain.payment import Payment

DARK = colors.HexColor("#2C3E50")
MUTED = colors.HexColor("#7F8C8D")
GRID = colors.HexColor("#BDC3C7")

_STATUS_COLORS = {
    InvoiceStatus.PAID: colors.HexColor("#27AE60"),
    InvoiceStatus.OVERDUE: colors.HexColor("#E74C3C"),
    InvoiceStatus.PARTIAL: colors.HexColor("#E67E22"),
    InvoiceStatus.CANCELED: colors.HexColor("#95A5A6"),
}


def _money(currency: str, amount) -> str:
    return f"{currency} {amount:,.2f}"


class ReportLabPdfService(PdfService):
    """
    ReportLab implementation of PdfService

    Renders the invoice header, bill-to block, line items (late fees
    marked), totals with balance due and the payment history.
    """

    def generate_invoice(
        self,
        invoice: Invoice,
        invoice_lines: List[InvoiceLine],
        payments: List[Payment],
        client: Optional[ClientInfo] = None,
        company_name: str = "Receivables",
    ) -> bytes:
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            rightMargin=20 * mm,
            leftMargin=20 * mm,
            topMargin=20 * mm,
            bottomMargin=20 * mm,
            title=f"Invoice {invoice.invoice_number}",
        )

        styles = getSampleStyleSheet()
        elements = []

        title_style = ParagraphStyle(
            "TitleStyle",
            parent=styles["Heading1"],
            fontSize=22,
            spaceAfter=6,
            textColor=DARK,
        )
        status_style = ParagraphStyle(
            "StatusStyle",
            parent=styles["Heading2"],
            fontSize=13,
            textColor=_STATUS_COLORS.get(invoice.status, DARK),
            spaceAfter=14,
        )
        normal_style = ParagraphStyle("NormalStyle", parent=styles["Normal"], fontSize=10)
        bold_style = ParagraphStyle(
            "BoldStyle",
            parent=styles["Normal"],
            fontSize=10,
            fontName="Helvetica-Bold",
        )

        currency = invoice.currency

        elements.append(Paragraph(company_name, title_style))
        elements.append(Paragraph(f"INVOICE {invoice.invoice_number} - {invoice.status.value.upper()}", status_style))

        if invoice.title:
            elements.append(Paragraph(invoice.title, bold_style))
        if invoice.description:
            elements.append(Paragraph(invoice.description, normal_style))
        elements.append(Spacer(1, 6 * mm))

        details = [
            ["Invoice Number:", invoice.invoice_number],
            ["Issue Date:", invoice.created_at.strftime("%Y-%m-%d")],
            ["Due Date:", invoice.due_date.strftime("%Y-%m-%d")],
        ]
        if invoice.sent_at:
            details.append(["Sent:", invoice.sent_at.strftime("%Y-%m-%d")])
        if invoice.paid_at:
            details.append(["Paid:", invoice.paid_at.strftime("%Y-%m-%d")])

        details_table = Table(details, colWidths=[35 * mm, 100 * mm])
        details_table.setStyle(
            TableStyle(
                [
                    ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 10),
                    ("TEXTCOLOR", (0, 0), (0, -1), MUTED),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
                ]
            )
        )
        elements.append(details_table)
        elements.append(Spacer(1, 6 * mm))

        elements.append(Paragraph("Bill To:", bold_style))
        if client:
            elements.append(Paragraph(client.name, normal_style))
            if client.email:
                elements.append(Paragraph(client.email, normal_style))
        else:
            elements.append(Paragraph(f"Client #{invoice.client_id}", normal_style))
        elements.append(Spacer(1, 8 * mm))

        line_data = [["Description", "Qty", "Unit Price", "Tax", "Amount"]]
        for line in invoice_lines:
            description = line.description
            if line.kind == LineItemKind.LATE_FEE:
                description = f"{description} *"
            line_data.append(
                [
                    description,
                    f"{line.quantity:,.4f}".rstrip("0").rstrip("."),
                    _money(currency, line.unit_price),
                    _money(currency, line.tax_amount),
                    _money(currency, line.line_total),
                ]
            )

        line_table = Table(line_data, colWidths=[65 * mm, 18 * mm, 30 * mm, 25 * mm, 32 * mm], repeatRows=1)
        line_table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), DARK),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 9),
                    ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
                    ("GRID", (0, 0), (-1, -1), 0.5, GRID),
                    ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#F8F9F9")]),
                ]
            )
        )
        elements.append(line_table)
        elements.append(Spacer(1, 4 * mm))

        totals = [
            ["Subtotal:", _money(currency, invoice.subtotal)],
            ["Tax:", _money(currency, invoice.tax_total)],
            ["Total:", _money(currency, invoice.total_amount)],
            ["Paid:", _money(currency, invoice.amount_paid)],
            ["Balance Due:", _money(currency, invoice.remaining_balance)],
        ]
        totals_table = Table(totals, colWidths=[138 * mm, 32 * mm])
        totals_table.setStyle(
            TableStyle(
                [
                    ("ALIGN", (0, 0), (-1, -1), "RIGHT"),
                    ("FONTSIZE", (0, 0), (-1, -1), 10),
                    ("FONTNAME", (0, 2), (-1, 2), "Helvetica-Bold"),
                    ("FONTNAME", (0, 4), (-1, 4), "Helvetica-Bold"),
                    ("LINEABOVE", (1, 4), (1, 4), 1.5, DARK),
                ]
            )
        )
        elements.append(totals_table)

        if payments:
            elements.append(Spacer(1, 8 * mm))
            elements.append(Paragraph("Payments Received", bold_style))
            payment_data = [["Date", "Reference", "Amount"]]
            for payment in payments:
                payment_data.append(
                    [
                        payment.payment_date.strftime("%Y-%m-%d"),
                        payment.reference or "",
                        _money(currency, payment.amount),
                    ]
                )
            payment_table = Table(payment_data, colWidths=[35 * mm, 103 * mm, 32 * mm])
            payment_table.setStyle(
                TableStyle(
                    [
                        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                        ("FONTSIZE", (0, 0), (-1, -1), 9),
                        ("ALIGN", (2, 0), (2, -1), "RIGHT"),
                        ("LINEBELOW", (0, 0), (-1, 0), 0.5, GRID),
                    ]
                )
            )
            elements.append(payment_table)

        if any(line.kind == LineItemKind.LATE_FEE for line in invoice_lines):
            elements.append(Spacer(1, 6 * mm))
            elements.append(
                Paragraph(
                    "<i>* Late payment fee applied to the overdue balance.</i>",
                    ParagraphStyle("FooterNote", parent=styles["Normal"], fontSize=8, textColor=MUTED),
                )
            )

        doc.build(elements)
        pdf_bytes = buffer.getvalue()
        buffer.close()

        return pdf_bytes
