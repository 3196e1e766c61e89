"""Tests for the response envelope."""

import json
from datetime import datetime

from app.utils.responses import error_response, success_response


def body(response) -> dict:
    return json.loads(response.body)


class TestSuccessResponse:
    def test_envelope(self):
        response = success_response(201, "Created", data={"id": 1})
        content = body(response)

        assert response.status_code == 201
        assert content["success"] is True
        assert content["message"] == "Created"
        assert content["data"] == {"id": 1}
        assert content["timestamp"].endswith("Z")

    def test_omits_missing_data(self):
        content = body(success_response(message="Done"))

        assert "data" not in content
        assert "meta" not in content

    def test_encodes_datetimes(self):
        content = body(success_response(data={"at": datetime(2025, 1, 1, 9, 0)}))

        assert content["data"]["at"] == "2025-01-01T09:00:00"


class TestErrorResponse:
    def test_envelope(self):
        response = error_response(
            400, "Validation failed", [{"field": "status", "message": "bad"}]
        )
        content = body(response)

        assert response.status_code == 400
        assert content["success"] is False
        assert content["errors"] == [{"field": "status", "message": "bad"}]

    def test_omits_empty_errors(self):
        assert "errors" not in body(error_response(404, "Application not found"))
