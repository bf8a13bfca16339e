"""Integration tests for the editing, confirmation and reporting endpoints"""

import pytest
from decimal import Decimal
from httpx import AsyncClient


async def _create_invoice(client: AsyncClient, client_id: int) -> dict:
    response = await client.post("/api/invoices", json={
        "client_id": client_id,
        "due_date": "2025-03-15",
        "title": "March services",
        "items": [{"description": "Consulting hours", "quantity": "10", "unit_price": "100.00"}],
    })
    assert response.status_code == 201
    return response.json()["data"]


async def _method_id(client: AsyncClient, name: str) -> int:
    response = await client.get("/api/payments/methods")
    return next(method["id"] for method in response.json()["data"] if method["name"] == name)


async def _pay(client: AsyncClient, invoice_id: int, amount: str, method_id: int) -> dict:
    response = await client.post(
        f"/api/payments/invoices/{invoice_id}",
        json={"amount": amount, "payment_method_id": method_id},
    )
    assert response.status_code == 201
    return response.json()["data"]


async def _create_template(client: AsyncClient, client_id: int) -> int:
    response = await client.post("/api/recurring", json={
        "client_id": client_id,
        "title": "Monthly retainer",
        "frequency": "monthly",
        "next_date": "2025-03-01",
        "auto_send": False,
        "items": [{"description": "Retainer", "quantity": "1", "unit_price": "500.00"}],
    })
    assert response.status_code == 201
    return response.json()["data"]["id"]


@pytest.mark.asyncio
class TestInvoiceMaintenanceAPI:

    async def test_update_items_reprices_invoice(self, client: AsyncClient, client_id):
        invoice = await _create_invoice(client, client_id)

        response = await client.patch(f"/api/invoices/{invoice['id']}", json={
            "title": "Design work",
            "items": [{"description": "Design", "quantity": "2", "unit_price": "300.00"}],
        })

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["title"] == "Design work"
        assert Decimal(data["total_amount"]) == Decimal("600.00")
        assert [item["description"] for item in data["items"]] == ["Design"]

    async def test_update_cannot_drop_total_below_amount_paid(self, client: AsyncClient, client_id):
        """
        Given: A 1000.00 invoice with 400.00 paid
        When: The items are replaced by a 300.00 line
        Then: 409 and the invoice keeps its old total
        """
        # Arrange
        invoice = await _create_invoice(client, client_id)
        await _pay(client, invoice["id"], "400.00", await _method_id(client, "Credit Card"))

        # Act
        response = await client.patch(f"/api/invoices/{invoice['id']}", json={
            "items": [{"description": "Discounted", "quantity": "1", "unit_price": "300.00"}],
        })

        # Assert
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "INVALID_OPERATION"
        refreshed = (await client.get(f"/api/invoices/{invoice['id']}")).json()["data"]
        assert Decimal(refreshed["total_amount"]) == Decimal("1000.00")

    async def test_summary_reports_collection_rate(self, client: AsyncClient, client_id):
        invoice = await _create_invoice(client, client_id)
        await _pay(client, invoice["id"], "400.00", await _method_id(client, "Credit Card"))

        response = await client.get("/api/invoices/summary", params={"refresh": True})

        assert response.status_code == 200
        summary = response.json()["data"]
        assert summary["total_invoices"] == 1
        assert Decimal(summary["total_billed"]) == Decimal("1000.00")
        assert Decimal(summary["total_collected"]) == Decimal("400.00")
        assert Decimal(summary["total_outstanding"]) == Decimal("600.00")
        assert summary["collection_rate"] == 40.0
        assert summary["by_status"]["partial"]["count"] == 1


@pytest.mark.asyncio
class TestPaymentMaintenanceAPI:

    async def test_update_amount_reapplies_balance(self, client: AsyncClient, client_id):
        invoice = await _create_invoice(client, client_id)
        paid = await _pay(client, invoice["id"], "400.00", await _method_id(client, "Credit Card"))

        response = await client.patch(f"/api/payments/{paid['payment']['id']}", json={"amount": "300.00"})

        assert response.status_code == 200
        balance = response.json()["data"]["invoice"]
        assert Decimal(balance["amount_paid"]) == Decimal("300.00")
        assert Decimal(balance["remaining_balance"]) == Decimal("700.00")

    async def test_update_amount_above_balance_is_422(self, client: AsyncClient, client_id):
        invoice = await _create_invoice(client, client_id)
        paid = await _pay(client, invoice["id"], "400.00", await _method_id(client, "Credit Card"))

        response = await client.patch(f"/api/payments/{paid['payment']['id']}", json={"amount": "1000.01"})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_confirm_payment_once(self, client: AsyncClient, client_id):
        """
        Given: A bank transfer payment awaiting confirmation
        When: It is confirmed twice
        Then: The first call confirms it and the second is rejected with 409
        """
        # Arrange
        invoice = await _create_invoice(client, client_id)
        paid = await _pay(client, invoice["id"], "250.00", await _method_id(client, "Bank Transfer"))
        payment_id = paid["payment"]["id"]
        assert paid["payment"]["is_confirmed"] is False

        # Act
        first = await client.post(f"/api/payments/{payment_id}/confirm")
        second = await client.post(f"/api/payments/{payment_id}/confirm")

        # Assert
        assert first.status_code == 200
        assert first.json()["data"]["payment"]["is_confirmed"] is True
        assert second.status_code == 409

    async def test_statistics_by_method(self, client: AsyncClient, client_id):
        invoice = await _create_invoice(client, client_id)
        card_id = await _method_id(client, "Credit Card")
        await _pay(client, invoice["id"], "400.00", card_id)
        await _pay(client, invoice["id"], "100.00", card_id)

        response = await client.get("/api/payments/statistics")

        assert response.status_code == 200
        stats = response.json()["data"]
        assert stats["total_payments"] == 2
        assert Decimal(stats["total_amount"]) == Decimal("500.00")
        assert Decimal(stats["average_amount"]) == Decimal("250.00")
        assert stats["by_method"][0]["payment_method_name"] == "Credit Card"

    async def test_unused_method_is_deleted(self, client: AsyncClient):
        created = await client.post("/api/payments/methods", json={"name": "Wire Transfer"})
        method_id = created.json()["data"]["id"]

        response = await client.delete(f"/api/payments/methods/{method_id}")

        assert response.status_code == 200
        assert response.json()["data"] == {"method_id": method_id, "deleted": True, "deactivated": False}

    async def test_used_method_is_deactivated(self, client: AsyncClient, client_id):
        invoice = await _create_invoice(client, client_id)
        card_id = await _method_id(client, "Credit Card")
        await _pay(client, invoice["id"], "100.00", card_id)

        response = await client.delete(f"/api/payments/methods/{card_id}")

        assert response.status_code == 200
        assert response.json()["data"]["deactivated"] is True
        active = (await client.get("/api/payments/methods", params={"active_only": True})).json()["data"]
        assert "Credit Card" not in [method["name"] for method in active]


@pytest.mark.asyncio
class TestPaymentPlanMaintenanceAPI:

    async def _create_plan(self, client: AsyncClient, client_id: int) -> dict:
        invoice = await _create_invoice(client, client_id)
        response = await client.post("/api/payments/plans", json={
            "invoice_id": invoice["id"],
            "name": "Two parts",
            "installments": [
                {"amount": "500.00", "due_date": "2025-03-05"},
                {"amount": "500.00", "due_date": "2025-04-15"},
            ],
        })
        assert response.status_code == 201
        return response.json()["data"]

    async def test_cancel_plan_cancels_pending_installments(self, client: AsyncClient, client_id):
        plan = await self._create_plan(client, client_id)

        first = await client.post(f"/api/payments/plans/{plan['id']}/cancel")
        second = await client.post(f"/api/payments/plans/{plan['id']}/cancel")

        assert first.status_code == 200
        canceled = first.json()["data"]
        assert canceled["status"] == "canceled"
        assert {i["status"] for i in canceled["installments"]} == {"canceled"}
        assert second.status_code == 409

    async def test_installment_reminders_sent_once(self, client: AsyncClient, client_id):
        """
        Given: A plan with one installment due in four days and one next month
        When: Installment reminders run twice with a seven day window
        Then: Only the near installment is reminded, and only on the first run
        """
        # Arrange
        plan = await self._create_plan(client, client_id)
        near_id = plan["installments"][0]["id"]

        # Act
        first = await client.post("/api/payments/installments/reminders", params={"days_ahead": 7})
        second = await client.post("/api/payments/installments/reminders", params={"days_ahead": 7})

        # Assert
        assert first.status_code == 200
        assert first.json()["data"]["reminders_sent"] == 1
        assert first.json()["data"]["installment_ids"] == [near_id]
        assert second.json()["data"]["checked"] == 0


@pytest.mark.asyncio
class TestRecurringMaintenanceAPI:

    async def test_cancel_then_reactivate(self, client: AsyncClient, client_id):
        template_id = await _create_template(client, client_id)

        canceled = await client.post(f"/api/recurring/{template_id}/cancel")
        reactivated = await client.post(f"/api/recurring/{template_id}/reactivate")
        again = await client.post(f"/api/recurring/{template_id}/reactivate")

        assert canceled.json()["data"]["status"] == "canceled"
        assert reactivated.status_code == 200
        assert reactivated.json()["data"]["status"] == "active"
        assert reactivated.json()["data"]["next_date"] == "2025-03-01"
        assert again.status_code == 409

    async def test_delete_unused_template(self, client: AsyncClient, client_id):
        template_id = await _create_template(client, client_id)

        response = await client.delete(f"/api/recurring/{template_id}")

        assert response.status_code == 200
        assert (await client.get(f"/api/recurring/{template_id}")).status_code == 404

    async def test_template_with_history_cannot_be_deleted(self, client: AsyncClient, client_id):
        template_id = await _create_template(client, client_id)
        generated = await client.post(f"/api/recurring/{template_id}/generate")
        assert generated.status_code == 200

        response = await client.delete(f"/api/recurring/{template_id}")

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "INVALID_OPERATION"
