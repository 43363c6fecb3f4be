"""Integration tests for the SIP and holdings APIs."""


class TestSipsApi:
    def test_create_and_invest(self, client):
        response = client.post(
            "/api/sips",
            json={
                "name": "Index Fund",
                "sip_amount": "5000",
                "start_date": "2025-01-05",
                "current_nav": "50",
            },
        )
        assert response.status_code == 201
        sip = response.json()
        assert float(sip["total_units"]) == 100

        response = client.post(
            f"/api/sips/{sip['id']}/installments",
            json={"amount": "5000", "nav": "62.5", "installment_date": "2025-02-05"},
        )
        assert response.status_code == 200
        data = response.json()
        assert float(data["total_units"]) == 180
        assert float(data["current_value"]) == 11250
        assert float(data["returns_percent"]) == 12.5

    def test_zero_nav_rejected(self, client, sip):
        response = client.put(f"/api/sips/{sip.id}/nav", json={"nav": "0"})
        assert response.status_code == 422

    def test_pause_resume(self, client, sip):
        assert client.post(f"/api/sips/{sip.id}/pause").json()["status"] == "paused"
        assert client.post(f"/api/sips/{sip.id}/pause").status_code == 409
        assert client.post(f"/api/sips/{sip.id}/resume").json()["status"] == "ongoing"

    def test_redeemed_sip_is_frozen(self, client, sip):
        response = client.post(
            f"/api/sips/{sip.id}/redeem", json={"redeemed_amount": "5600", "redeemed_date": "2025-09-01"}
        )
        assert response.status_code == 200
        assert response.json()["status"] == "redeemed"

        assert client.put(f"/api/sips/{sip.id}/nav", json={"nav": "60"}).status_code == 409
        assert client.put(f"/api/sips/{sip.id}/units", json={"total_units": "1"}).status_code == 409
        assert client.put(f"/api/sips/{sip.id}", json={"name": "New"}).status_code == 409

        history = client.get(f"/api/history/sip/{sip.id}").json()
        assert [e["kind"] for e in history] == ["redeem", "sip"]


class TestHoldingsApi:
    def test_create_uppercases_symbol(self, client):
        response = client.post(
            "/api/holdings",
            json={
                "market": "us",
                "symbol": "aapl",
                "quantity": "10",
                "invested_value": "1500",
                "buy_date": "2025-02-01",
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert data["symbol"] == "AAPL"
        assert data["name"] == "AAPL"
        assert float(data["buy_price"]) == 150

    def test_price_or_invested_value_required(self, client):
        response = client.post(
            "/api/holdings",
            json={"market": "us", "symbol": "aapl", "quantity": "10", "buy_date": "2025-02-01"},
        )
        assert response.status_code == 422

    def test_price_update_and_sell(self, client, traded_holding):
        data = client.put(f"/api/holdings/{traded_holding.id}/price", json={"current_price": "180"}).json()
        assert float(data["profit_loss"]) == 300
        assert float(data["profit_loss_percent"]) == 20

        response = client.post(
            f"/api/holdings/{traded_holding.id}/sell", json={"sell_price": "200", "sell_date": "2025-06-01"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "sold"
        assert float(data["current_value"]) == 2000

        response = client.put(f"/api/holdings/{traded_holding.id}/price", json={"current_price": "210"})
        assert response.status_code == 409

    def test_sell_before_buy(self, client, traded_holding):
        response = client.post(
            f"/api/holdings/{traded_holding.id}/sell", json={"sell_price": "200", "sell_date": "2025-01-01"}
        )
        assert response.status_code == 422

    def test_list_main_tile(self, client, traded_holding):
        client.post(
            "/api/holdings",
            json={
                "market": "us",
                "symbol": "msft",
                "tile_id": "tile-1",
                "quantity": "1",
                "buy_price": "400",
                "buy_date": "2025-02-01",
            },
        )

        main = client.get("/api/holdings", params={"market": "us", "tile_id": "main"}).json()
        assert [h["symbol"] for h in main] == ["AAPL"]

        everything = client.get("/api/holdings", params={"market": "us"}).json()
        assert len(everything) == 2

    def test_unknown_market(self, client):
        assert client.get("/api/holdings", params={"market": "forex"}).status_code == 422
