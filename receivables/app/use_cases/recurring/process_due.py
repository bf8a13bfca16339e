"""ProcessDueRecurringInvoices Use Case"""

import logging
from receivables.libs.result import Result, Return, Error
from receivables.app.services.clock import Clock
from receivables.app.repositories.recurring_template_repository import RecurringTemplateRepository
from .generate_recurring_invoice import GenerateRecurringInvoice
from .dtos import ProcessDueResultDTO, TemplateRunDTO

logger = logging.getLogger(__name__)


class ProcessDueRecurringInvoices:
    """
    Use Case: Generate invoices for every due recurring template

    Business Rules:
    1. Due means active with next_date <= today
    2. One invoice per template per run
    3. A failing template is reported and does not stop the others
    4. Running twice on the same day generates nothing the second time
    """

    def __init__(
        self,
        template_repo: RecurringTemplateRepository,
        generate_invoice: GenerateRecurringInvoice,
        clock: Clock,
    ):
        self.template_repo = template_repo
        self.generate_invoice = generate_invoice
        self.clock = clock

    async def execute(self) -> Result[ProcessDueResultDTO]:
        today = self.clock.today()
        try:
            # Ids only: a failed generation rolls back and expires loaded rows
            due_ids = [template.id for template in await self.template_repo.list_due(today)]
        except Exception as e:
            logger.error(f"Failed to load due recurring templates: {e}")
            return Return.err(
                Error(
                    code="PROCESS_RECURRING_FAILED",
                    message="Failed to load due recurring templates",
                    reason=str(e),
                )
            )

        logger.info(f"Found {len(due_ids)} recurring templates due on {today}")

        results = []
        for template_id in due_ids:
            result = await self.generate_invoice.execute(template_id)
            if result.is_ok():
                results.append(
                    TemplateRunDTO(
                        template_id=template_id,
                        success=True,
                        invoice_id=result.value.invoice_id,
                        invoice_number=result.value.invoice_number,
                    )
                )
            else:
                logger.error(
                    f"Recurring template {template_id} failed: {result.error.message} ({result.error.reason})"
                )
                results.append(
                    TemplateRunDTO(
                        template_id=template_id,
                        success=False,
                        error=result.error.reason or result.error.message,
                    )
                )

        succeeded = sum(1 for r in results if r.success)
        return Return.ok(
            ProcessDueResultDTO(
                run_date=today,
                processed=len(results),
                succeeded=succeeded,
                failed=len(results) - succeeded,
                results=results,
            )
        )
