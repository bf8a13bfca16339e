"""Line item parsing shared by invoices and recurring templates"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple
from receivables.domain.invoice_line import InvoiceLine, LineItemKind
from receivables.domain.lifecycle import calculate_line, parse_decimal


@dataclass
class ParsedLineItem:
    description: str
    quantity: Decimal
    unit_price: Decimal
    tax_rate: Decimal


def _parse_amount(value, field: str, errors: List[str], default: Optional[Decimal] = None) -> Optional[Decimal]:
    if value is None or value == "":
        if default is not None:
            return default
        errors.append(f"{field} is required")
        return None
    try:
        number = parse_decimal(value)
    except ValueError:
        errors.append(f"{field} must be a number")
        return None
    if number < 0:
        errors.append(f"{field} must be non-negative")
        return None
    return number


def parse_line_items(items: Optional[Sequence], field: str = "items") -> Tuple[List[ParsedLineItem], List[str]]:
    """
    Validate raw line items

    Every problem is collected rather than stopping at the first one.

    Args:
        items: Objects with description, quantity, unit_price, tax_rate
        field: Name used as the prefix in error messages

    Returns:
        (parsed items, error messages); parsed is only complete when
        errors is empty
    """
    errors: List[str] = []
    parsed: List[ParsedLineItem] = []

    if not items:
        errors.append(f"{field}: at least one line item is required")
        return parsed, errors

    for index, item in enumerate(items):
        prefix = f"{field}[{index}]"
        description = (item.description or "").strip()
        if not description:
            errors.append(f"{prefix}.description is required")

        quantity = _parse_amount(item.quantity, f"{prefix}.quantity", errors)
        unit_price = _parse_amount(item.unit_price, f"{prefix}.unit_price", errors)
        tax_rate = _parse_amount(item.tax_rate, f"{prefix}.tax_rate", errors, default=Decimal("0"))

        if description and quantity is not None and unit_price is not None and tax_rate is not None:
            parsed.append(ParsedLineItem(description, quantity, unit_price, tax_rate))

    return parsed, errors


def build_invoice_lines(
    items: Sequence[ParsedLineItem],
    invoice_id: int,
    start_position: int = 0,
) -> List[InvoiceLine]:
    """Turn parsed items into priced standard InvoiceLines"""
    lines = []
    for offset, item in enumerate(items):
        amount, tax_amount = calculate_line(item.quantity, item.unit_price, item.tax_rate)
        lines.append(
            InvoiceLine(
                invoice_id=invoice_id,
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                tax_rate=item.tax_rate,
                amount=amount,
                tax_amount=tax_amount,
                kind=LineItemKind.STANDARD,
                position=start_position + offset,
            )
        )
    return lines
