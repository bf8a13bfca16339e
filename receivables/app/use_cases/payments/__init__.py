"""Payment use cases"""
from .ledger import PaymentLedger, RecordedPayment
from .receipts import PaymentReceipts
from .record_payment import RecordPayment
from .update_payment import UpdatePayment, ConfirmPayment
from .delete_payment import DeletePayment
from .list_payments import ListPayments, GetPaymentStatistics
from .payment_methods import (
    ListPaymentMethods,
    CreatePaymentMethod,
    UpdatePaymentMethod,
    DeletePaymentMethod,
)
from .payment_plans import (
    CreatePaymentPlan,
    GetPaymentPlan,
    ListPaymentPlans,
    CancelPaymentPlan,
    RecordInstallmentPayment,
    SendInstallmentReminders,
)
from .dtos import (
    RecordPaymentCommandDTO,
    UpdatePaymentCommandDTO,
    PaymentResponseDTO,
    InvoiceBalanceDTO,
    PaymentResultDTO,
    PaymentStatisticsQueryDTO,
    PaymentStatisticsDTO,
    CreatePaymentMethodCommandDTO,
    UpdatePaymentMethodCommandDTO,
    PaymentMethodDTO,
    DeletePaymentMethodResultDTO,
    InstallmentInputDTO,
    CreatePaymentPlanCommandDTO,
    InstallmentDTO,
    PaymentPlanDTO,
    InstallmentPaymentResultDTO,
    InstallmentReminderResultDTO,
)

__all__ = [
    "PaymentLedger",
    "RecordedPayment",
    "PaymentReceipts",
    "RecordPayment",
    "UpdatePayment",
    "ConfirmPayment",
    "DeletePayment",
    "ListPayments",
    "GetPaymentStatistics",
    "ListPaymentMethods",
    "CreatePaymentMethod",
    "UpdatePaymentMethod",
    "DeletePaymentMethod",
    "CreatePaymentPlan",
    "GetPaymentPlan",
    "ListPaymentPlans",
    "CancelPaymentPlan",
    "RecordInstallmentPayment",
    "SendInstallmentReminders",
    "RecordPaymentCommandDTO",
    "UpdatePaymentCommandDTO",
    "PaymentResponseDTO",
    "InvoiceBalanceDTO",
    "PaymentResultDTO",
    "PaymentStatisticsQueryDTO",
    "PaymentStatisticsDTO",
    "CreatePaymentMethodCommandDTO",
    "UpdatePaymentMethodCommandDTO",
    "PaymentMethodDTO",
    "DeletePaymentMethodResultDTO",
    "InstallmentInputDTO",
    "CreatePaymentPlanCommandDTO",
    "InstallmentDTO",
    "PaymentPlanDTO",
    "InstallmentPaymentResultDTO",
    "InstallmentReminderResultDTO",
]
