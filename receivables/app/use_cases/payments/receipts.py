"""Post-commit payment notifications

Best-effort: every failure is logged and reported as a flag, never raised.
"""

import logging
from typing import Optional
from receivables.app.services.client_directory import ClientDirectory
from receivables.app.services.notifier import EmailMessage, Notification, Notifier
from receivables.domain.invoice import Invoice
from receivables.domain.payment import Payment
from receivables.domain.payment_method import PaymentMethod

logger = logging.getLogger(__name__)


class PaymentReceipts:
    """Sends in-app notifications and client receipts for payments"""

    def __init__(
        self,
        notifier: Notifier,
        client_directory: ClientDirectory,
        company_name: str = "Receivables",
    ):
        self.notifier = notifier
        self.client_directory = client_directory
        self.company_name = company_name

    async def payment_recorded(
        self, invoice: Invoice, payment: Payment, method: Optional[PaymentMethod]
    ) -> bool:
        """
        Notify about a new payment

        Returns:
            True if any notification failed
        """
        failed = False
        try:
            await self.notifier.create_notification(
                Notification(
                    type="payment_received",
                    title="Payment Received",
                    message=f"Payment of {payment.amount} received for invoice #{invoice.invoice_number}",
                    entity_id=invoice.id,
                    entity_type="invoice",
                )
            )
        except Exception as e:
            logger.warning(f"Payment notification failed for invoice {invoice.invoice_number}: {e}")
            failed = True

        if not payment.is_confirmed:
            try:
                method_name = method.name if method else "unknown method"
                await self.notifier.create_notification(
                    Notification(
                        type="payment_needs_confirmation",
                        title="Payment Needs Confirmation",
                        message=(
                            f"Payment of {payment.amount} via {method_name} for invoice "
                            f"#{invoice.invoice_number} requires confirmation"
                        ),
                        entity_id=payment.id,
                        entity_type="payment",
                    )
                )
            except Exception as e:
                logger.warning(f"Confirmation notification failed for payment {payment.id}: {e}")
                failed = True
            return failed

        if not await self.send_receipt(invoice, payment, method):
            failed = True
        return failed

    async def send_receipt(self, invoice: Invoice, payment: Payment, method: Optional[PaymentMethod]) -> bool:
        """
        Email a payment receipt to the client

        Returns:
            True if the receipt went out or there was nobody to send it to
        """
        try:
            client = await self.client_directory.find_by_id(invoice.client_id)
            if not client or not client.email:
                logger.info(f"No email on file for client {invoice.client_id}, skipping receipt")
                return True

            body = (
                f"Dear {client.name},\n\n"
                f"Thank you for your payment of {payment.amount} {invoice.currency} "
                f"received on {payment.payment_date.isoformat()} for invoice #{invoice.invoice_number}.\n\n"
                f"Payment method: {method.name if method else 'N/A'}\n"
                f"Reference: {payment.reference or 'N/A'}\n"
                f"Remaining balance: {invoice.remaining_balance} {invoice.currency}\n\n"
                f"{self.company_name}"
            )
            result = await self.notifier.send_email(
                EmailMessage(
                    to=client.email,
                    subject=f"Payment Receipt - Invoice #{invoice.invoice_number}",
                    body=body,
                    template="payment_receipt",
                    template_data={
                        "client_name": client.name,
                        "invoice_number": invoice.invoice_number,
                        "amount": str(payment.amount),
                        "remaining_balance": str(invoice.remaining_balance),
                    },
                )
            )
            if not result.success:
                logger.warning(f"Receipt email failed for payment {payment.id}: {result.error}")
            return result.success
        except Exception as e:
            logger.warning(f"Receipt email failed for payment {payment.id}: {e}")
            return False
