"""Integration tests for the history ledger API."""


class TestHistoryApi:
    def test_record_backdated_snapshot(self, client, liquid_account):
        response = client.post(
            f"/api/history/liquid_account/{liquid_account.id}",
            json={"date": "2024-12-31", "value": "2100", "notes": "statement"},
        )
        assert response.status_code == 201
        assert float(response.json()["value"]) == 2100

        history = client.get(f"/api/history/liquid_account/{liquid_account.id}").json()
        assert history[0]["date"] == "2024-12-31"

        # The account balance itself is untouched
        account = client.get(f"/api/accounts/{liquid_account.id}").json()
        assert float(account["balance"]) == 2500

    def test_record_plan_snapshot_with_premium(self, client, cover_plan):
        response = client.post(
            f"/api/history/cover_plan/{cover_plan.id}",
            json={"date": "2024-01-01", "value": "9000000", "premium_amount": "11000"},
        )
        assert response.status_code == 201
        assert float(response.json()["premium_amount"]) == 11000

    def test_plan_snapshot_without_premium_rejected(self, client, cover_plan):
        response = client.post(
            f"/api/history/cover_plan/{cover_plan.id}",
            json={"date": "2024-01-01", "value": "9000"},
        )
        assert response.status_code == 422
        assert "premium_amount" in response.json()["detail"]

    def test_goal_snapshot_without_amount_rejected(self, client, savings_goal):
        response = client.post(
            f"/api/history/savings_goal/{savings_goal.id}",
            json={"date": "2024-01-01", "value": "9000"},
        )
        assert response.status_code == 422
        assert client.get(f"/api/history/savings_goal/{savings_goal.id}").json() == []

    def test_snapshot_on_transaction_ledger_rejected(self, client, fixed_deposit):
        response = client.post(
            f"/api/history/fixed_deposit/{fixed_deposit.id}",
            json={"date": "2025-02-01", "value": "1"},
        )
        assert response.status_code == 409

    def test_correct_and_delete_snapshot(self, client, liquid_account):
        entry = client.get(f"/api/history/liquid_account/{liquid_account.id}").json()[0]

        response = client.put(f"/api/history/liquid_account/entries/{entry['id']}", json={"value": "2600"})
        assert response.status_code == 200
        assert float(response.json()["value"]) == 2600

        response = client.delete(f"/api/history/liquid_account/entries/{entry['id']}")
        assert response.status_code == 204
        assert client.get(f"/api/history/liquid_account/{liquid_account.id}").json() == []

    def test_transaction_entries_cannot_be_edited(self, client, fixed_deposit):
        entry = client.get(f"/api/history/fixed_deposit/{fixed_deposit.id}").json()[0]
        assert entry["kind"] == "open"

        response = client.put(f"/api/history/fixed_deposit/entries/{entry['id']}", json={"value": "1"})
        assert response.status_code == 409

    def test_unknown_kind(self, client):
        assert client.get("/api/history/bonds/anything").status_code == 422

    def test_unknown_instrument(self, client):
        assert client.get("/api/history/sip/missing").status_code == 404
