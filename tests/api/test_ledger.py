"""
Tests for ledger API endpoints.

These test the HTTP layer: status codes, response format,
and error handling. Posting rules are tested in
test_ledger_engine.py.
"""

import uuid
from decimal import Decimal


def create_invoice(client, amount="1000.00"):
    response = client.post("/invoices", json={
        "customer_ref": "ACME Ltd",
        "invoice_amount": amount,
    })
    assert response.status_code == 201
    return response.json()


class TestIntegrity:

    def test_empty_ledger_is_balanced(self, client):
        data = client.get("/ledger/integrity").json()
        assert data["is_balanced"] is True
        assert data["unbalanced_batches"] == []

    def test_balanced_after_settlement(self, client, accounts):
        invoice = create_invoice(client)["invoice"]
        client.post(f"/invoices/{invoice['id']}/transitions", json={
            "target_status": "PARTIALLY_PAID",
            "payment_amount": "250.00",
        })

        data = client.get("/ledger/integrity").json()
        assert data["is_balanced"] is True
        assert Decimal(data["total_debits"]) == Decimal("1250.00")
        assert Decimal(data["total_credits"]) == Decimal("1250.00")
        assert Decimal(data["difference"]) == Decimal("0")


class TestBatches:

    def test_batch_entries_in_row_order(self, client, accounts):
        created = create_invoice(client)

        response = client.get(f"/ledger/batches/{created['batch_id']}")
        assert response.status_code == 200

        rows = response.json()
        assert [r["row_num"] for r in rows] == [1, 2]
        assert [r["id"] for r in rows] == created["ledger_entry_ids"]
        assert rows[0]["account_id"] == accounts.accounts_receivable
        assert rows[0]["entry_type"] == "DEBIT"
        assert Decimal(rows[0]["debit_amount"]) == Decimal("1000.00")
        assert Decimal(rows[0]["credit_amount"]) == Decimal("0")
        assert rows[1]["account_id"] == accounts.sales_revenue
        assert rows[1]["status_snapshot"] == "PENDING"

    def test_unknown_batch_returns_404(self, client):
        response = client.get(f"/ledger/batches/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"

    def test_malformed_batch_id_returns_422(self, client):
        response = client.get("/ledger/batches/not-a-uuid")
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"
