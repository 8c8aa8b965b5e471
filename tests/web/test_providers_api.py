from tests.web.conftest import create_provider_in_db


class TestProvidersApi:
    def test_list_empty(self, client):
        response = client.get("/api/providers/")

        assert response.status_code == 200
        assert response.json() == []

    def test_list(self, client, test_engine):
        create_provider_in_db(test_engine, code="WBSEDCL")
        create_provider_in_db(test_engine, code="CESC", supports_timely_rebate=True)

        data = client.get("/api/providers/").json()

        assert [p["code"] for p in data] == ["CESC", "WBSEDCL"]
        assert data[0]["supports_timely_rebate"] is True
        assert "created_at" not in data[0]

    def test_slabs(self, client, test_engine):
        create_provider_in_db(test_engine)

        response = client.get("/api/providers/CESC/slabs")

        assert response.status_code == 200
        data = response.json()
        assert data["provider_code"] == "CESC"
        assert data["slabs"] == [
            {"min_unit": 0, "max_unit": 50, "rate_paise_per_kwh": 500, "position": 0},
            {"min_unit": 51, "max_unit": 100, "rate_paise_per_kwh": 650, "position": 1},
            {"min_unit": 101, "max_unit": None, "rate_paise_per_kwh": 800, "position": 2},
        ]

    def test_slabs_unknown_provider(self, client):
        response = client.get("/api/providers/XYZ/slabs")

        assert response.status_code == 404
        assert response.json()["error"] == "provider_not_found"
