"""Payment ledger operations

Shared by every use case that moves money on an invoice. Nothing here
commits; callers own the unit of work.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional
from receivables.app.repositories.invoice_repository import InvoiceRepository
from receivables.app.repositories.payment_repository import PaymentRepository
from receivables.app.repositories.payment_method_repository import PaymentMethodRepository
from receivables.app.services.clock import Clock
from receivables.domain.base import to_money
from receivables.domain.errors import NotFoundError, ValidationError
from receivables.domain.invoice import Invoice
from receivables.domain.lifecycle import ensure_payable, parse_decimal, recompute_status
from receivables.domain.payment import Payment
from receivables.domain.payment_method import PaymentMethod

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


@dataclass
class RecordedPayment:
    invoice: Invoice
    payment: Payment
    method: Optional[PaymentMethod]


def parse_payment_amount(value, errors: List[str], field: str = "amount") -> Optional[Decimal]:
    """
    Validate a payment amount, appending problems to errors

    Returns:
        The amount, or None when invalid
    """
    if value is None or value == "":
        errors.append(f"{field} is required")
        return None
    try:
        amount = parse_decimal(value)
    except ValueError:
        errors.append(f"{field} must be a number")
        return None
    if amount <= 0:
        errors.append(f"{field} must be greater than 0")
        return None
    if amount != amount.quantize(Decimal("0.01")):
        errors.append(f"{field} cannot have more than 2 decimal places")
        return None
    return to_money(amount)


class PaymentLedger:
    """
    Applies and reverses payments on invoices

    Business Rules:
    1. Invoice row is locked before the balance is checked
    2. Payments only on issued, unpaid, non-canceled invoices
    3. 0 < amount <= remaining balance, at most 2 decimals
    4. amount_paid moves by exactly the payment amount and never below 0
    5. Status is re-derived after every mutation
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        payment_repo: PaymentRepository,
        method_repo: PaymentMethodRepository,
        clock: Clock,
    ):
        self.invoice_repo = invoice_repo
        self.payment_repo = payment_repo
        self.method_repo = method_repo
        self.clock = clock

    async def lock_invoice(self, invoice_id: int) -> Invoice:
        invoice = await self.invoice_repo.get_by_id(invoice_id, for_update=True)
        if not invoice:
            raise NotFoundError("Invoice", invoice_id)
        return invoice

    async def resolve_method(self, method_id: Optional[int], errors: List[str], required: bool = True) -> Optional[PaymentMethod]:
        if method_id is None:
            if required:
                errors.append("payment_method_id is required")
            return None
        method = await self.method_repo.get_by_id(method_id)
        if not method:
            errors.append(f"payment_method_id: payment method {method_id} not found")
            return None
        if not method.is_active:
            errors.append(f"payment_method_id: payment method {method.name} is inactive")
            return None
        return method

    async def record(
        self,
        invoice_id: int,
        amount,
        payment_method_id: Optional[int],
        payment_date: Optional[date] = None,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
        is_confirmed: Optional[bool] = None,
        require_method: bool = True,
    ) -> RecordedPayment:
        """
        Insert a payment and apply it to its invoice

        Args:
            invoice_id: Invoice to pay
            amount: Raw amount input
            payment_method_id: Payment method (required unless require_method is False)
            payment_date: Date received; defaults to today
            reference: External reference
            notes: Free-form notes
            is_confirmed: Overrides the method's confirmation default
            require_method: Allow an unattributed payment

        Returns:
            RecordedPayment with the updated invoice

        Raises:
            NotFoundError: invoice missing
            InvalidOperationError: invoice canceled, draft or already paid
            ValidationError: invalid amount or method, or amount above the
                remaining balance
        """
        invoice = await self.lock_invoice(invoice_id)
        ensure_payable(invoice)

        errors: List[str] = []
        parsed_amount = parse_payment_amount(amount, errors)
        method = await self.resolve_method(payment_method_id, errors, required=require_method)
        if errors:
            raise ValidationError(errors, message="Invalid payment data")

        remaining = to_money(Decimal(invoice.total_amount) - Decimal(invoice.amount_paid))
        if parsed_amount > remaining:
            raise ValidationError(
                [f"amount: payment of {parsed_amount} exceeds remaining balance of {remaining}"],
                message="Payment exceeds remaining balance",
            )

        if is_confirmed is None:
            is_confirmed = not (method and method.requires_confirmation)

        payment = await self.payment_repo.create(
            Payment(
                invoice_id=invoice.id,
                amount=parsed_amount,
                payment_date=payment_date or self.clock.today(),
                payment_method_id=method.id if method else None,
                reference=reference,
                notes=notes,
                is_confirmed=is_confirmed,
            )
        )

        invoice.amount_paid = to_money(Decimal(invoice.amount_paid) + parsed_amount)
        recompute_status(invoice, self.clock.today(), self.clock.now())
        invoice = await self.invoice_repo.update(invoice)

        logger.info(
            f"Recorded payment {payment.id} of {parsed_amount} on invoice {invoice.invoice_number}, "
            f"status={invoice.status.value}"
        )
        return RecordedPayment(invoice=invoice, payment=payment, method=method)

    async def change_amount(self, invoice: Invoice, old_amount: Decimal, new_amount: Decimal) -> Invoice:
        """
        Replace a payment's contribution to amount_paid

        Raises:
            ValidationError: if the new amount exceeds what remains once
                the old amount is taken back
        """
        available = to_money(Decimal(invoice.total_amount) - Decimal(invoice.amount_paid) + Decimal(old_amount))
        if new_amount > available:
            raise ValidationError(
                [f"amount: payment of {new_amount} exceeds remaining balance of {available}"],
                message="Payment exceeds remaining balance",
            )
        invoice.amount_paid = to_money(Decimal(invoice.amount_paid) - Decimal(old_amount) + new_amount)
        recompute_status(invoice, self.clock.today(), self.clock.now())
        return await self.invoice_repo.update(invoice)

    async def reverse(self, invoice: Invoice, amount: Decimal) -> Invoice:
        """Take a deleted payment's amount back off the invoice"""
        new_paid = to_money(Decimal(invoice.amount_paid) - Decimal(amount))
        if new_paid < ZERO:
            logger.warning(
                f"Reversal of {amount} on invoice {invoice.invoice_number} would go below zero, clamping"
            )
            new_paid = ZERO
        invoice.amount_paid = new_paid
        recompute_status(invoice, self.clock.today(), self.clock.now())
        return await self.invoice_repo.update(invoice)
