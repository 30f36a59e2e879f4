import csv
from io import StringIO, BytesIO

from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib import colors
from reportlab.lib.units import inch

from ..config import settings
from ..models import Bill
from .currency import CURRENCY_SYMBOLS, to_money


def _room_label(bill: Bill) -> str:
    bed = bill.tenant.bed
    if not bed:
        return "-"
    return f"{bed.room.property.name} / {bed.label}"


def generate_bills_csv(bills: list[Bill]) -> str:
    """Generates a CSV export of bills."""
    output = StringIO()
    writer = csv.writer(output)

    writer.writerow(["Bill ID", "Tenant", "Phone", "Bed", "Month", "Due Date", "Total", "Paid", "Balance", "Status"])

    for b in bills:
        writer.writerow([
            b.id,
            b.tenant.name,
            b.tenant.user.phone,
            _room_label(b),
            b.billing_month.strftime("%Y-%m"),
            b.due_date.isoformat(),
            f"{to_money(b.total_amount):.2f}",
            f"{to_money(b.paid_amount):.2f}",
            f"{b.balance:.2f}",
            b.status.value,
        ])

    return output.getvalue()


def generate_bill_pdf(bill: Bill) -> bytes:
    """Renders a single bill, its line items and payments as a PDF invoice."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, rightMargin=0.5*inch, leftMargin=0.5*inch, topMargin=0.5*inch, bottomMargin=0.5*inch)
    styles = getSampleStyleSheet()
    # ReportLab's base fonts lack the rupee glyph
    symbol = "Rs. " if settings.CURRENCY == "INR" else CURRENCY_SYMBOLS.get(settings.CURRENCY, "")
    elements = []

    elements.append(Paragraph(f"{settings.APP_NAME} - Invoice #{bill.id}", styles['h1']))
    elements.append(Paragraph(f"{bill.tenant.name} ({bill.tenant.user.phone}) - {_room_label(bill)}", styles['h2']))
    elements.append(Paragraph(
        f"Billing month: {bill.billing_month.strftime('%B %Y')} &nbsp; Due: {bill.due_date.strftime('%d %b %Y')} "
        f"&nbsp; Status: {bill.status.value.title()}",
        styles['Normal'],
    ))
    elements.append(Spacer(1, 0.25*inch))

    data = [["Item", "Description", "Qty", "Unit price", "Amount"]]
    for item in bill.line_items:
        data.append([
            item.item_type.value.replace("_", " ").title(),
            item.description,
            f"{to_money(item.quantity):g}",
            f"{symbol}{to_money(item.unit_price):,.2f}",
            f"{symbol}{to_money(item.amount):,.2f}",
        ])
    data.append(["", "", "", "Total", f"{symbol}{to_money(bill.total_amount):,.2f}"])
    data.append(["", "", "", "Paid", f"{symbol}{to_money(bill.paid_amount):,.2f}"])
    data.append(["", "", "", "Balance", f"{symbol}{bill.balance:,.2f}"])

    table = Table(data, colWidths=[1.1*inch, 3*inch, 0.6*inch, 1.2*inch, 1.2*inch])
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.teal),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (2, 0), (-1, -1), 'RIGHT'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTNAME', (3, -3), (-1, -1), 'Helvetica-Bold'),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 12),
        ('GRID', (0, 0), (-1, -4), 1, colors.black),
    ]))
    elements.append(table)

    if bill.payments:
        elements.append(Spacer(1, 0.25*inch))
        elements.append(Paragraph("Payments", styles['h3']))
        rows = [["Date", "Method", "Reference", "Amount", "Status"]]
        for p in bill.payments:
            rows.append([
                p.transaction_date.isoformat(),
                p.payment_method.value.replace("_", " ").title(),
                p.reference or "-",
                f"{symbol}{to_money(p.amount):,.2f}",
                p.status.value.title(),
            ])
        payments = Table(rows, colWidths=[1.2*inch, 1.4*inch, 2*inch, 1.2*inch, 1.1*inch])
        payments.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.lightgrey),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
        ]))
        elements.append(payments)

    doc.build(elements)
    return buffer.getvalue()
