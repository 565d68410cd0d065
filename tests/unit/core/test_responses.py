"""
Unit Tests for Response Envelope Builders.
"""

from notes_api.core.responses import create_api_response, create_error_response


class TestCreateApiResponse:
    """Tests for the success envelope."""

    def test_success_envelope_shape(self):
        body = create_api_response({"id": "x"}, "Done", 201)

        assert body["success"] is True
        assert body["message"] == "Done"
        assert body["data"] == {"id": "x"}
        assert body["timestamp"].endswith("Z")
        assert "statusCode" not in body

    def test_data_omitted_when_none(self):
        assert "data" not in create_api_response(message="Logged out")

    def test_falsy_data_is_kept(self):
        assert create_api_response([])["data"] == []

    def test_success_flag_follows_status(self):
        assert create_api_response(status_code=299)["success"] is True
        assert create_api_response(status_code=300)["success"] is False

    def test_stable_except_timestamp(self):
        first = create_api_response({"a": 1}, "m")
        second = create_api_response({"a": 1}, "m")
        first.pop("timestamp")
        second.pop("timestamp")
        assert first == second


class TestCreateErrorResponse:
    """Tests for the error envelope."""

    def test_error_envelope_shape(self):
        body = create_error_response("Note not found", 404)

        assert body == {
            "success": False,
            "error": "Note not found",
            "timestamp": body["timestamp"],
            "statusCode": 404,
        }

    def test_details_only_when_enabled(self):
        hidden = create_error_response("Boom", 500, {"type": "KeyError"})
        shown = create_error_response("Boom", 500, {"type": "KeyError"}, include_details=True)

        assert "details" not in hidden
        assert shown["details"] == {"type": "KeyError"}

    def test_errors_always_rendered(self):
        body = create_error_response("Validation error", 400, errors=["Title is required"])
        assert body["errors"] == ["Title is required"]

    def test_description_becomes_message(self):
        body = create_error_response("Route not found", 404, description="No such route")
        assert body["message"] == "No such route"
