"""JSON API for the financial calculators.

Every calculator in the registry is exposed as ``POST /api/<slug>``. Users can
keep calculations as saved scenarios, tied to an anonymous token stored in the
Flask session cookie.
"""

import os
from typing import Any, Dict, Optional, Tuple
from uuid import uuid4

from flask import Blueprint, Flask, current_app, jsonify, request, session

from fincalc.calculators.currency import load_exchange_rates
from fincalc.registry import CALCULATORS, get_calculator, run_calculator
from fincalc.utils import to_jsonable
from fincalc_web.scenario_store import ScenarioStore, create_store_from_env

GENERIC_ERROR = "Unable to calculate with the given inputs."

api = Blueprint("api", __name__, url_prefix="/api")


def _store() -> ScenarioStore:
    return current_app.extensions["scenario_store"]


def _ensure_user_token() -> str:
    token = session.get("user_token")
    if not token:
        token = uuid4().hex
        session["user_token"] = token
        session.modified = True
    return token


def _json_body() -> Optional[Dict[str, Any]]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


def _error(message: str, status: int):
    return jsonify({"error": message}), status


def _calculate(slug: str, inputs: Dict[str, Any]) -> Tuple[Optional[Any], Optional[tuple]]:
    """Run a calculator; returns ``(result, None)`` or ``(None, error response)``."""
    try:
        calculator = get_calculator(slug)
    except LookupError:
        return None, _error(f"Unknown calculator: {slug}", 404)
    try:
        errors, result = run_calculator(calculator, inputs, current_app.extensions["exchange_rates"])
    except ValueError as exc:
        current_app.logger.info("Calculation %s failed: %s", slug, exc)
        return None, _error(GENERIC_ERROR, 400)
    if errors:
        return None, (jsonify({"errors": errors}), 422)
    return to_jsonable(result), None


@api.get("/calculators")
def list_calculators():
    return jsonify(
        {
            "calculators": [
                {"slug": slug, "title": calculator.title, "has_schedule": calculator.schedule_field is not None}
                for slug, calculator in CALCULATORS.items()
            ]
        }
    )


@api.post("/<slug>")
def calculate(slug: str):
    inputs = _json_body()
    if inputs is None:
        return _error("Request body must be a JSON object", 400)
    result, failure = _calculate(slug, inputs)
    if failure:
        return failure
    return jsonify({"calculator": slug, "result": result})


@api.get("/scenarios")
def list_scenarios():
    user_token = _ensure_user_token()
    return jsonify({"scenarios": _store().list_scenarios(user_token)})


@api.post("/scenarios")
def save_scenario():
    body = _json_body()
    if body is None or not isinstance(body.get("inputs"), dict):
        return _error("Request body must contain a calculator and an inputs object", 400)
    slug = str(body.get("calculator", ""))
    result, failure = _calculate(slug, body["inputs"])
    if failure:
        return failure

    user_token = _ensure_user_token()
    scenario_id = uuid4().hex
    name = str(body.get("name", "")).strip() or CALCULATORS[slug].title
    _store().add_scenario(user_token, scenario_id, slug, name, body["inputs"], result)
    current_app.logger.debug("Saved scenario %s (%s) for %s", scenario_id, slug, user_token)
    return jsonify(_store().get_scenario(user_token, scenario_id)), 201


@api.delete("/scenarios/<scenario_id>")
def remove_scenario(scenario_id: str):
    user_token = session.get("user_token")
    if not _store().remove_scenario(user_token, scenario_id):
        return _error("Scenario not found", 404)
    return "", 204


@api.delete("/scenarios")
def clear_scenarios():
    _store().clear_scenarios(session.get("user_token"))
    return "", 204


def create_app(test_config: Optional[Dict[str, Any]] = None) -> Flask:
    """Create the Flask app.

    Settings come from the environment (``FLASK_SECRET_KEY``,
    ``SCENARIO_DATABASE_URL``, ``SCENARIO_LIMIT``, ``EXCHANGE_RATES_FILE``)
    and can be overridden with ``test_config``.
    """
    app = Flask(__name__)
    app.config.from_mapping(
        SECRET_KEY=os.environ.get("FLASK_SECRET_KEY", "dev-secret-key"),
        SCENARIO_DATABASE_URL=os.environ.get("SCENARIO_DATABASE_URL"),
        SCENARIO_LIMIT=os.environ.get("SCENARIO_LIMIT"),
        EXCHANGE_RATES_FILE=os.environ.get("EXCHANGE_RATES_FILE"),
    )
    if test_config:
        app.config.update(test_config)

    app.extensions["scenario_store"] = create_store_from_env(
        app.config["SCENARIO_DATABASE_URL"], app.config["SCENARIO_LIMIT"]
    )
    rates_file = app.config["EXCHANGE_RATES_FILE"]
    app.extensions["exchange_rates"] = load_exchange_rates(rates_file) if rates_file else None

    app.register_blueprint(api)
    return app


if __name__ == "__main__":
    print("Starting financial calculator API...")
    create_app().run(host="0.0.0.0", port=8710, debug=True)
