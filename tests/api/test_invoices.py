"""
Tests for invoice API endpoints.

These test the HTTP layer: status codes, the error envelope,
and tenant resolution. Settlement rules are tested in
test_invoice_state_machine.py.
"""

from decimal import Decimal


def create_invoice(client, amount="1000.00", headers=None, **fields):
    return client.post(
        "/invoices",
        json={"customer_ref": "ACME Ltd", "invoice_amount": amount, **fields},
        headers=headers,
    )


def transition(client, invoice_id, target, headers=None, **fields):
    return client.post(
        f"/invoices/{invoice_id}/transitions",
        json={"target_status": target, **fields},
        headers=headers,
    )


class TestCreateInvoice:

    def test_create_returns_201(self, client, accounts):
        response = create_invoice(client)
        assert response.status_code == 201

        data = response.json()
        assert data["invoice"]["status"] == "PENDING"
        assert data["invoice"]["version"] == 1
        assert data["invoice"]["tenant_id"] == "default"
        assert Decimal(data["invoice"]["outstanding_amount"]) == Decimal("1000.00")
        assert data["batch_id"]
        assert len(data["ledger_entry_ids"]) == 2

    def test_create_as_paid(self, client, accounts):
        data = create_invoice(client, initial_status="PAID").json()
        assert data["invoice"]["status"] == "PAID"
        assert Decimal(data["invoice"]["outstanding_amount"]) == Decimal("0")

    def test_longest_customer_ref_is_accepted(self, client, accounts):
        response = create_invoice(client, customer_ref="B" * 255)
        assert response.status_code == 201
        invoice_id = response.json()["invoice"]["id"]

        response = transition(client, invoice_id, "PAID")
        assert response.status_code == 200

        rows = client.get(f"/invoices/{invoice_id}/ledger").json()
        assert all(len(r["description"]) == 255 for r in rows)

    def test_create_as_overdue_returns_422(self, client, accounts):
        response = create_invoice(client, initial_status="OVERDUE")
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_negative_amount_returns_422(self, client, accounts):
        response = create_invoice(client, amount="-5")
        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert body["retryable"] is False

    def test_tenant_without_settings_returns_404(self, client, accounts):
        response = create_invoice(client, headers={"X-Tenant-ID": "nobody"})
        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"


class TestGetInvoice:

    def test_get_invoice(self, client, accounts):
        invoice_id = create_invoice(client).json()["invoice"]["id"]

        response = client.get(f"/invoices/{invoice_id}")
        assert response.status_code == 200
        assert response.json()["customer_ref"] == "ACME Ltd"

    def test_unknown_invoice_returns_404(self, client, accounts):
        response = client.get("/invoices/999")
        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"

    def test_other_tenant_gets_404(self, client, accounts, seed_tenant):
        seed_tenant("other")
        invoice_id = create_invoice(client).json()["invoice"]["id"]

        response = client.get(
            f"/invoices/{invoice_id}", headers={"X-Tenant-ID": "other"}
        )
        assert response.status_code == 404

    def test_invoice_ledger(self, client, accounts):
        invoice_id = create_invoice(client).json()["invoice"]["id"]
        transition(client, invoice_id, "PAID")

        rows = client.get(f"/invoices/{invoice_id}/ledger").json()
        assert len(rows) == 4
        assert {r["invoice_id"] for r in rows} == {invoice_id}
        assert [r["status_snapshot"] for r in rows] == [
            "PENDING", "PENDING", "PAID", "PAID",
        ]


class TestTransitions:

    def test_partial_payment(self, client, accounts):
        invoice_id = create_invoice(client).json()["invoice"]["id"]

        response = transition(
            client, invoice_id, "PARTIALLY_PAID", payment_amount="400.00"
        )
        assert response.status_code == 200

        data = response.json()
        assert data["invoice"]["status"] == "PARTIALLY_PAID"
        assert data["invoice"]["version"] == 2
        assert Decimal(data["invoice"]["outstanding_amount"]) == Decimal("600.00")
        assert len(data["ledger_entry_ids"]) == 2

    def test_status_only_transition_posts_nothing(self, client, accounts):
        invoice_id = create_invoice(client).json()["invoice"]["id"]

        data = transition(client, invoice_id, "OVERDUE").json()
        assert data["invoice"]["status"] == "OVERDUE"
        assert data["batch_id"] is None
        assert data["ledger_entry_ids"] == []

    def test_illegal_transition_returns_409(self, client, accounts):
        invoice_id = create_invoice(client).json()["invoice"]["id"]
        transition(client, invoice_id, "CANCELLED")

        response = transition(client, invoice_id, "PAID")
        assert response.status_code == 409

        body = response.json()
        assert body["error_code"] == "ILLEGAL_TRANSITION"
        assert body["retryable"] is False
        assert body["details"]["allowed"] == []

    def test_overpayment_returns_422(self, client, accounts):
        invoice_id = create_invoice(client).json()["invoice"]["id"]

        response = transition(
            client, invoice_id, "PARTIALLY_PAID", payment_amount="1500"
        )
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_overpayment_on_partially_paid_invoice_returns_422(self, client, accounts):
        invoice_id = create_invoice(client).json()["invoice"]["id"]
        transition(client, invoice_id, "PARTIALLY_PAID", payment_amount="400")

        response = transition(
            client, invoice_id, "PARTIALLY_PAID", payment_amount="700"
        )
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        assert len(client.get(f"/invoices/{invoice_id}/ledger").json()) == 4

    def test_non_numeric_payment_returns_422(self, client, accounts):
        invoice_id = create_invoice(client).json()["invoice"]["id"]

        response = transition(
            client, invoice_id, "PARTIALLY_PAID", payment_amount="lots"
        )
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_stale_version_returns_409_retryable(self, client, accounts):
        invoice_id = create_invoice(client).json()["invoice"]["id"]
        transition(client, invoice_id, "OVERDUE")

        response = transition(client, invoice_id, "PAID", expected_version=1)
        assert response.status_code == 409

        body = response.json()
        assert body["error_code"] == "CONCURRENCY_CONFLICT"
        assert body["retryable"] is True

    def test_unknown_target_status_returns_422(self, client, accounts):
        invoice_id = create_invoice(client).json()["invoice"]["id"]

        response = transition(client, invoice_id, "REFUNDED")
        assert response.status_code == 422
