"""Integration tests for the account, asset and plan APIs."""

from datetime import date


class TestAccountsApi:
    """CRUD for liquid accounts."""

    def test_create_and_list(self, client):
        response = client.post("/api/accounts", json={"name": "Checking", "balance": "2500.50"})
        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Checking"
        assert float(data["balance"]) == 2500.50

        listed = client.get("/api/accounts").json()
        assert [a["id"] for a in listed] == [data["id"]]

    def test_create_requires_name(self, client):
        response = client.post("/api/accounts", json={"name": "", "balance": "1"})
        assert response.status_code == 422

    def test_update_writes_today_snapshot(self, client, liquid_account):
        response = client.put(f"/api/accounts/{liquid_account.id}", json={"balance": "3000"})
        assert response.status_code == 200
        assert float(response.json()["balance"]) == 3000

        history = client.get(f"/api/history/liquid_account/{liquid_account.id}").json()
        assert len(history) == 1
        assert history[0]["date"] == date.today().isoformat()
        assert float(history[0]["value"]) == 3000

    def test_get_missing(self, client):
        response = client.get("/api/accounts/does-not-exist")
        assert response.status_code == 404

    def test_delete(self, client, liquid_account):
        response = client.delete(f"/api/accounts/{liquid_account.id}")
        assert response.status_code == 204
        assert client.get(f"/api/accounts/{liquid_account.id}").status_code == 404
        assert client.delete(f"/api/accounts/{liquid_account.id}").status_code == 404


class TestAssetsApi:
    """Valued assets and their category filter."""

    def test_filter_by_category(self, client, valued_asset):
        client.post("/api/assets", json={"name": "Gold", "value": "80000", "category": "investment"})

        response = client.get("/api/assets", params={"category": "investment"})
        assert response.status_code == 200
        assert [a["name"] for a in response.json()] == ["Gold"]

    def test_unknown_category_rejected(self, client):
        response = client.post("/api/assets", json={"name": "Art", "value": "1", "category": "art"})
        assert response.status_code == 422

    def test_negative_value_rejected(self, client):
        response = client.post("/api/assets", json={"name": "Car", "value": "-1"})
        assert response.status_code == 422


class TestPlansApi:
    """Cover plans report expiry on read."""

    def test_expired_plan(self, client):
        response = client.post(
            "/api/plans",
            json={
                "name": "Old Policy",
                "cover_amount": "100000",
                "premium_amount": "1000",
                "expiry_date": "2000-01-01",
            },
        )
        assert response.status_code == 201
        assert response.json()["is_expired"] is True

    def test_active_plan(self, client, cover_plan):
        data = client.get(f"/api/plans/{cover_plan.id}").json()
        assert data["is_expired"] is False
        assert float(data["cover_amount"]) == 10000000

    def test_custom_frequency_without_days(self, client, cover_plan):
        response = client.put(f"/api/plans/{cover_plan.id}", json={"premium_frequency": "custom"})
        assert response.status_code == 422
