from types import SimpleNamespace

import pytest
from flask import Flask, abort

from usermirror.api.errors import register_error_handlers


@pytest.fixture()
def flask_client():
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.logger = SimpleNamespace(error=lambda *args, **kwargs: None)

    register_error_handlers(app)

    @app.route("/crash")
    def crash():
        raise RuntimeError("boom")

    @app.route("/bad")
    def bad():
        abort(400, "invalid payload")

    @app.route("/server-error")
    def server_error():
        abort(500)

    with app.test_client() as client:
        yield client


def test_bad_request_includes_description(flask_client):
    response = flask_client.get("/bad")
    assert response.status_code == 400
    assert response.get_json() == {"error": "Bad Request", "message": "invalid payload"}


def test_unhandled_exception_returns_generic_json(flask_client):
    response = flask_client.get("/crash")
    assert response.status_code == 500
    payload = response.get_json()
    assert payload == {"error": "Internal Server Error", "message": "An unexpected error occurred"}
    assert "boom" not in response.get_data(as_text=True)


def test_explicit_500_returns_json(flask_client):
    response = flask_client.get("/server-error")
    assert response.status_code == 500
    assert response.get_json()["error"] == "Internal Server Error"


def test_not_found_returns_json(flask_client):
    response = flask_client.get("/missing")
    assert response.status_code == 404
    assert response.get_json()["error"] == "Not Found"
