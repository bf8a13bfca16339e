"""Overdue escalation use cases"""
from .escalation import ReminderSender, LateFeeApplier
from .send_reminder import SendReminder
from .apply_late_fee import ApplyLateFee
from .process_overdue import ProcessOverdueInvoices, STATISTICS_CACHE_KEY
from .reports import GetOverdueInvoices, GetOverdueStatistics
from .settings import (
    GetOverdueConfig,
    UpdateOverdueConfig,
    ListReminderTemplates,
    CreateReminderTemplate,
    UpdateReminderTemplate,
    DeleteReminderTemplate,
    ListReminderLogs,
)
from .dtos import (
    OverdueQueryDTO,
    OverdueInvoiceDTO,
    SendReminderCommandDTO,
    ReminderResultDTO,
    ApplyLateFeeCommandDTO,
    LateFeeResultDTO,
    ProcessOverdueResultDTO,
    OverdueStatisticsDTO,
    OverdueConfigDTO,
    UpdateOverdueConfigCommandDTO,
    CreateReminderTemplateCommandDTO,
    UpdateReminderTemplateCommandDTO,
    ReminderTemplateDTO,
    ReminderLogDTO,
)

__all__ = [
    "ReminderSender",
    "LateFeeApplier",
    "SendReminder",
    "ApplyLateFee",
    "ProcessOverdueInvoices",
    "STATISTICS_CACHE_KEY",
    "GetOverdueInvoices",
    "GetOverdueStatistics",
    "GetOverdueConfig",
    "UpdateOverdueConfig",
    "ListReminderTemplates",
    "CreateReminderTemplate",
    "UpdateReminderTemplate",
    "DeleteReminderTemplate",
    "ListReminderLogs",
    "OverdueQueryDTO",
    "OverdueInvoiceDTO",
    "SendReminderCommandDTO",
    "ReminderResultDTO",
    "ApplyLateFeeCommandDTO",
    "LateFeeResultDTO",
    "ProcessOverdueResultDTO",
    "OverdueStatisticsDTO",
    "OverdueConfigDTO",
    "UpdateOverdueConfigCommandDTO",
    "CreateReminderTemplateCommandDTO",
    "UpdateReminderTemplateCommandDTO",
    "ReminderTemplateDTO",
    "ReminderLogDTO",
]
