import json

import pytest

from fincalc_web.app import create_app
from fincalc_web.scenario_store import ScenarioStore


@pytest.fixture
def app(tmp_path):
    return create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test",
            "SCENARIO_DATABASE_URL": f"sqlite:///{tmp_path / 'scenarios.sqlite3'}",
            "SCENARIO_LIMIT": 3,
        }
    )


@pytest.fixture
def client(app):
    return app.test_client()


def test_list_calculators(client):
    response = client.get("/api/calculators")
    assert response.status_code == 200
    slugs = [c["slug"] for c in response.get_json()["calculators"]]
    assert "annuity-payout" in slugs
    assert len(slugs) == 9


def test_calculate(client):
    response = client.post("/api/annuity-payout", json={"principal": 500000, "annual_rate": 5, "years": 10})
    assert response.status_code == 200
    result = response.get_json()["result"]
    assert result["payout_amount"] == pytest.approx(5303.28, abs=0.01)
    assert result["total_payments"] == 120
    assert len(result["schedule"]) == 10


def test_never_depleting_payout_returns_nulls(client):
    response = client.post("/api/annuity-payout", json={"principal": 100000, "annual_rate": 6, "payout_amount": 400})
    result = response.get_json()["result"]
    assert result["will_grow"] is True
    assert result["total_payments"] is None


def test_validation_errors_are_422(client):
    response = client.post("/api/rent", json={"monthly_rent": -1, "years": 0})
    assert response.status_code == 422
    errors = response.get_json()["errors"]
    assert "Monthly rent cannot be negative" in errors
    assert "Years must be between 1 and 50" in errors


def test_unknown_and_missing_fields_are_422(client):
    response = client.post("/api/discount", json={"original_price": 10, "colour": "red"})
    assert response.status_code == 422
    assert response.get_json()["errors"] == ["Unknown field(s): colour"]
    response = client.post("/api/lease", json={"asset_value": 30000})
    assert response.status_code == 422
    assert response.get_json()["errors"][0].startswith("Missing required field(s)")


def test_undefined_formula_is_400_with_generic_message(client):
    response = client.post("/api/discount", json={"discount_percent": 20, "discount_amount": 10})
    assert response.status_code == 400
    assert response.get_json() == {"error": "Unable to calculate with the given inputs."}


def test_non_object_body_is_400(client):
    response = client.post("/api/discount", data="[1, 2]", content_type="application/json")
    assert response.status_code == 400


def test_unknown_calculator_is_404(client):
    response = client.post("/api/mortgage", json={})
    assert response.status_code == 404


def test_currency_result_is_serialisable(client):
    response = client.post("/api/currency", json={"amount": 100, "from_currency": "USD", "to_currency": "JPY"})
    assert response.status_code == 200
    conversion = response.get_json()["result"]["conversion"]
    assert conversion["converted_amount"] == pytest.approx(14900)
    assert isinstance(conversion["timestamp"], str)


def test_exchange_rates_file_is_used(tmp_path):
    rates = tmp_path / "rates.json"
    rates.write_text(json.dumps({"EUR": 0.5}), encoding="utf-8")
    app = create_app(
        {
            "TESTING": True,
            "SCENARIO_DATABASE_URL": f"sqlite:///{tmp_path / 'rates.sqlite3'}",
            "EXCHANGE_RATES_FILE": str(rates),
        }
    )
    response = app.test_client().post("/api/currency", json={"amount": 10, "to_currency": "EUR"})
    assert response.get_json()["result"]["conversion"]["converted_amount"] == pytest.approx(5)


def test_scenarios_lifecycle(client):
    assert client.get("/api/scenarios").get_json() == {"scenarios": []}

    response = client.post(
        "/api/scenarios",
        json={"calculator": "discount", "name": "Sale", "inputs": {"original_price": 100, "discount_percent": 20}},
    )
    assert response.status_code == 201
    saved = response.get_json()
    assert saved["name"] == "Sale"
    assert saved["calculator"] == "discount"
    assert saved["result"]["final_price"] == pytest.approx(80)

    scenarios = client.get("/api/scenarios").get_json()["scenarios"]
    assert [s["id"] for s in scenarios] == [saved["id"]]

    assert client.delete(f"/api/scenarios/{saved['id']}").status_code == 204
    assert client.delete(f"/api/scenarios/{saved['id']}").status_code == 404
    assert client.get("/api/scenarios").get_json() == {"scenarios": []}


def test_invalid_scenarios_are_not_saved(client):
    response = client.post("/api/scenarios", json={"calculator": "rent", "inputs": {"monthly_rent": -5}})
    assert response.status_code == 422
    response = client.post("/api/scenarios", json={"calculator": "rent"})
    assert response.status_code == 400
    assert client.get("/api/scenarios").get_json() == {"scenarios": []}


def test_scenarios_are_trimmed_and_cleared(client):
    for price in (100, 200, 300, 400):
        response = client.post(
            "/api/scenarios",
            json={"calculator": "discount", "inputs": {"original_price": price, "discount_percent": 10}},
        )
        assert response.status_code == 201
    scenarios = client.get("/api/scenarios").get_json()["scenarios"]
    assert len(scenarios) == 3
    assert scenarios[-1]["inputs"]["original_price"] == 400
    assert scenarios[0]["name"] == "Discount"

    assert client.delete("/api/scenarios").status_code == 204
    assert client.get("/api/scenarios").get_json() == {"scenarios": []}


def test_scenarios_are_private_to_a_session(app):
    first, second = app.test_client(), app.test_client()
    first.post("/api/scenarios", json={"calculator": "discount", "inputs": {"original_price": 50, "final_price": 40}})
    assert len(first.get("/api/scenarios").get_json()["scenarios"]) == 1
    assert second.get("/api/scenarios").get_json() == {"scenarios": []}


def test_store_ignores_missing_user_token(tmp_path):
    store = ScenarioStore(f"sqlite:///{tmp_path / 'store.sqlite3'}")
    store.add_scenario("", "id", "rent", "Rent", {}, {})
    assert store.list_scenarios("") == []
    assert store.remove_scenario("", "id") is False
    assert store.get_scenario("", "id") is None


def test_wrongly_typed_fields_are_422(client):
    response = client.post("/api/currency", json={"amount": 1, "from_currency": 5})
    assert response.status_code == 422
    assert response.get_json()["errors"] == ["Invalid text for from_currency"]
    response = client.post(
        "/api/payment",
        json={"present_value": 10000, "annual_interest_rate": 6, "number_of_periods": 12, "compounding": []},
    )
    assert response.status_code == 422
    response = client.post("/api/rent", json={"monthly_rent": 1500, "years": 12.7})
    assert response.status_code == 422


def test_infinite_amounts_are_422(client):
    response = client.post("/api/currency", json={"amount": "Infinity"})
    assert response.status_code == 422
    response = client.post("/api/rent", json={"monthly_rent": "inf"})
    assert response.status_code == 422
