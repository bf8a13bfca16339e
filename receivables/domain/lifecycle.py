"""Invoice Lifecycle Engine

Pure functions owning invoice totals and the invoice state machine.
Nothing here touches the database; use cases load entities, call these
functions and persist the result.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation as DecimalInvalidOperation
from typing import Dict, FrozenSet, Iterable, Tuple
from receivables.domain.base import to_money
from receivables.domain.errors import InvalidOperationError
from receivables.domain.invoice import Invoice, InvoiceStatus
from receivables.domain.invoice_line import InvoiceLine

ZERO = Decimal("0.00")

# Explicit transitions a caller may request. Payment-driven moves
# (partial, paid, overdue) go through recompute_status instead.
ALLOWED_TRANSITIONS: Dict[InvoiceStatus, FrozenSet[InvoiceStatus]] = {
    InvoiceStatus.DRAFT: frozenset({InvoiceStatus.PENDING, InvoiceStatus.SENT, InvoiceStatus.CANCELED}),
    InvoiceStatus.PENDING: frozenset({InvoiceStatus.DRAFT, InvoiceStatus.SENT, InvoiceStatus.CANCELED}),
    InvoiceStatus.SENT: frozenset({InvoiceStatus.OVERDUE}),
    InvoiceStatus.PARTIAL: frozenset({InvoiceStatus.OVERDUE}),
    InvoiceStatus.OVERDUE: frozenset(),
    InvoiceStatus.PAID: frozenset(),
    InvoiceStatus.CANCELED: frozenset(),
}

# Statuses recompute_status is allowed to move away from
_DERIVED_STATUSES = frozenset({
    InvoiceStatus.PENDING,
    InvoiceStatus.SENT,
    InvoiceStatus.PARTIAL,
    InvoiceStatus.OVERDUE,
    InvoiceStatus.PAID,
})


def parse_decimal(value) -> Decimal:
    """
    Convert user input to Decimal

    Raises:
        ValueError: if value is not numeric
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"not a number: {value!r}")
    try:
        result = Decimal(str(value).strip())
    except (DecimalInvalidOperation, ValueError):
        raise ValueError(f"not a number: {value!r}")
    if not result.is_finite():
        raise ValueError(f"not a finite number: {value!r}")
    return result


def calculate_line(quantity: Decimal, unit_price: Decimal, tax_rate: Decimal) -> Tuple[Decimal, Decimal]:
    """
    Compute a line's pre-tax amount and tax, both rounded half-up to cents

    Args:
        quantity: Units billed
        unit_price: Price per unit
        tax_rate: Tax rate in percent (8.25 means 8.25%)

    Returns:
        (amount, tax_amount)
    """
    raw_amount = Decimal(quantity) * Decimal(unit_price)
    amount = to_money(raw_amount)
    tax_amount = to_money(raw_amount * Decimal(tax_rate) / Decimal(100))
    return amount, tax_amount


def calculate_totals(lines: Iterable[InvoiceLine]) -> Tuple[Decimal, Decimal, Decimal]:
    """
    Sum line amounts into (subtotal, tax_total, total)
    """
    subtotal = ZERO
    tax_total = ZERO
    for line in lines:
        subtotal += Decimal(line.amount)
        tax_total += Decimal(line.tax_amount)
    subtotal = to_money(subtotal)
    tax_total = to_money(tax_total)
    return subtotal, tax_total, to_money(subtotal + tax_total)


def apply_totals(invoice: Invoice, lines: Iterable[InvoiceLine]) -> Invoice:
    """Write calculate_totals onto the invoice"""
    invoice.subtotal, invoice.tax_total, invoice.total_amount = calculate_totals(lines)
    return invoice


def recompute_status(invoice: Invoice, today: date, now: datetime) -> InvoiceStatus:
    """
    Derive the invoice status from amount_paid, total_amount and due date

    Rules:
    - draft and canceled are never touched
    - amount_paid >= total_amount -> paid (paid_at set once)
    - 0 < amount_paid < total_amount -> partial, even when past due
    - nothing paid and past due -> overdue
    - nothing paid, not past due, coming back from partial/overdue/paid
      -> sent if the invoice was sent, pending otherwise

    Args:
        invoice: Invoice to update in place
        today: Current calendar date
        now: Current timestamp, used for paid_at

    Returns:
        The resulting status
    """
    current = invoice.status
    if current not in _DERIVED_STATUSES:
        return current

    total = Decimal(invoice.total_amount)
    paid = Decimal(invoice.amount_paid)

    if total > ZERO and paid >= total:
        new_status = InvoiceStatus.PAID
    elif paid > ZERO:
        new_status = InvoiceStatus.PARTIAL
    elif invoice.is_past_due(today):
        new_status = InvoiceStatus.OVERDUE
    elif current in (InvoiceStatus.PARTIAL, InvoiceStatus.OVERDUE, InvoiceStatus.PAID):
        new_status = InvoiceStatus.SENT if invoice.sent_at else InvoiceStatus.PENDING
    else:
        new_status = current

    if new_status == InvoiceStatus.PAID:
        if invoice.paid_at is None:
            invoice.paid_at = now
    else:
        invoice.paid_at = None

    invoice.status = new_status
    return new_status


def ensure_transition(current: InvoiceStatus, target: InvoiceStatus) -> None:
    """
    Validate an explicitly requested status change

    Raises:
        InvalidOperationError: if the transition is not allowed
    """
    if current == target:
        return
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidOperationError(
            f"Cannot change invoice status from {current.value} to {target.value}",
            reason=f"allowed from {current.value}: "
                   + (", ".join(sorted(s.value for s in ALLOWED_TRANSITIONS[current])) or "none"),
        )


def ensure_deletable(invoice: Invoice) -> None:
    if invoice.status != InvoiceStatus.PENDING:
        raise InvalidOperationError(
            f"Invoice {invoice.invoice_number} cannot be deleted",
            reason=f"only pending invoices can be deleted, status is {invoice.status.value}",
        )


def ensure_editable(invoice: Invoice) -> None:
    if invoice.status in (InvoiceStatus.PAID, InvoiceStatus.CANCELED):
        raise InvalidOperationError(
            f"Invoice {invoice.invoice_number} cannot be modified",
            reason=f"invoice is {invoice.status.value}",
        )


def ensure_payable(invoice: Invoice) -> None:
    """Payments are accepted only on issued, unpaid, non-canceled invoices"""
    if invoice.status == InvoiceStatus.CANCELED:
        raise InvalidOperationError(
            "Cannot record payment for a canceled invoice",
            reason=f"invoice {invoice.invoice_number} is canceled",
        )
    if invoice.status == InvoiceStatus.DRAFT:
        raise InvalidOperationError(
            "Cannot record payment for a draft invoice",
            reason=f"invoice {invoice.invoice_number} has not been issued",
        )
    if invoice.status == InvoiceStatus.PAID:
        raise InvalidOperationError(
            "Invoice is already paid",
            reason=f"invoice {invoice.invoice_number} has no remaining balance",
        )
