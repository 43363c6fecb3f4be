"""Integration tests for the summary API."""


class TestSummaryApi:
    def test_empty_overview(self, client):
        response = client.get("/api/summary/overview")
        assert response.status_code == 200
        data = response.json()
        assert float(data["net_worth"]) == 0
        assert data["assets_by_category"] == {}
        assert data["by_kind"]["fixed_deposit"]["active_count"] == 0

    def test_overview_excludes_cover(self, client, liquid_account, valued_asset, cover_plan):
        data = client.get("/api/summary/overview").json()
        assert float(data["net_worth"]) == 502500
        assert float(data["total_cover"]) == 10000000
        assert float(data["assets_by_category"]["asset"]) == 500000

    def test_class_summary(self, client, fixed_deposit):
        data = client.get("/api/summary/fixed_deposit").json()
        assert data["kind"] == "fixed_deposit"
        assert data["active_count"] == 1
        assert float(data["total_invested"]) == 100000
        assert float(data["total_value"]) == 107000

    def test_holding_tile_summary(self, client, traded_holding):
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

        main = client.get("/api/summary/traded_holding", params={"market": "us", "tile_id": "main"}).json()
        assert main["active_count"] == 1
        assert float(main["total_value"]) == 1500

        by_market = client.get("/api/summary/holdings/by-market").json()
        assert by_market["us"]["active_count"] == 2
        assert float(by_market["us"]["total_invested"]) == 1900

    def test_unknown_kind(self, client):
        assert client.get("/api/summary/bonds").status_code == 422
