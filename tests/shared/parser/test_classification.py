import pytest

from rpcws.protocol.base import (
    ErrorResponse,
    Notification,
    Request,
    SuccessResponse,
)
from rpcws.shared.exceptions import MessageParseError
from rpcws.shared.message_builder import MessageBuilder, serialize_message
from rpcws.shared.message_parser import MessageParser, decode_frame


class TestClassify:
    def setup_method(self):
        self.parser = MessageParser()

    def test_object_without_id_and_with_method_is_notification(self):
        message = self.parser.classify({"jsonrpc": "2.0", "method": "tick"})
        assert isinstance(message, Notification)

    def test_null_id_with_method_is_notification(self):
        message = self.parser.classify({"id": None, "method": "tick"})
        assert isinstance(message, Notification)

    def test_id_and_method_is_request_never_notification(self):
        message = self.parser.classify({"id": "1", "method": "ask"})
        assert isinstance(message, Request)

    def test_zero_id_is_an_identifier(self):
        message = self.parser.classify({"id": 0, "method": "ask"})
        assert isinstance(message, Request)
        assert message.id == 0

    def test_id_and_result_is_success_response_despite_extras(self):
        # Act
        message = self.parser.classify(
            {"jsonrpc": "2.0", "id": 1, "result": 3, "extra": "ignored"}
        )

        # Assert
        assert isinstance(message, SuccessResponse)
        assert message.result == 3

    def test_falsy_results_are_success_responses(self):
        for result in (0, False, None, "", [], {}):
            message = self.parser.classify({"id": 1, "result": result})
            assert isinstance(message, SuccessResponse)
            assert message.result == result

    def test_id_and_error_is_error_response(self):
        # Act
        message = self.parser.classify(
            {"id": 1, "error": {"code": -32000, "message": "boom", "data": [1]}}
        )

        # Assert
        assert isinstance(message, ErrorResponse)
        assert message.error.code == -32000
        assert message.error.data == [1]

    def test_result_takes_priority_over_error(self):
        message = self.parser.classify(
            {"id": 1, "result": 1, "error": {"code": 1, "message": "x"}}
        )
        assert isinstance(message, SuccessResponse)

    def test_method_takes_priority_over_result(self):
        message = self.parser.classify({"id": 1, "method": "ask", "result": 1})
        assert isinstance(message, Request)

    def test_unclassifiable_shapes_return_none(self):
        for payload in ({}, {"jsonrpc": "2.0"}, {"id": 1}, {"params": [1]}):
            assert self.parser.classify(payload) is None

    def test_non_objects_return_none(self):
        for payload in ([{"method": "batched"}], "text", 42, None, True):
            assert self.parser.classify(payload) is None

    def test_invalid_field_types_return_none(self):
        # method must be a string
        assert self.parser.classify({"method": 5}) is None
        # error must be an error object
        assert self.parser.classify({"id": 1, "error": "bad"}) is None
        # result needs a non-null id
        assert self.parser.classify({"id": None, "result": 1}) is None

    def test_error_with_null_id_is_error_response(self):
        # Act
        message = self.parser.classify(
            {"id": None, "error": {"code": -32700, "message": "Parse error"}}
        )

        # Assert
        assert isinstance(message, ErrorResponse)
        assert message.id is None

    def test_error_without_id_key_is_dropped(self):
        assert self.parser.classify({"error": {"code": 1, "message": "x"}}) is None


class TestPredicates:
    def setup_method(self):
        self.parser = MessageParser()

    def test_exactly_one_predicate_matches(self):
        payloads = [
            {"method": "n"},
            {"id": 1, "method": "r"},
            {"id": 1, "result": 1},
            {"id": 1, "error": {"code": 1, "message": "e"}},
        ]
        for payload in payloads:
            matches = [
                self.parser.is_notification(payload),
                self.parser.is_request(payload),
                self.parser.is_success_response(payload),
                self.parser.is_error_response(payload),
            ]
            assert matches.count(True) == 1, payload


class TestDecodeFrame:
    def test_decodes_text(self):
        assert decode_frame('{"id": 1, "result": 2}') == {"id": 1, "result": 2}

    def test_decodes_utf8_bytes(self):
        assert decode_frame('{"method": "héllo"}'.encode()) == {"method": "héllo"}

    def test_invalid_json_raises(self):
        with pytest.raises(MessageParseError) as exc_info:
            decode_frame("{not json")
        assert exc_info.value.raw == "{not json"

    def test_invalid_utf8_raises(self):
        with pytest.raises(MessageParseError):
            decode_frame(b"\xff\xfe")

    def test_parse_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            decode_frame("")


class TestRoundTrip:
    def test_request_survives_encode_decode_classify(self):
        # Arrange
        builder = MessageBuilder(id_generator=lambda: "req-1")
        parser = MessageParser()
        request = builder.build_request("sum", {"a": 1, "b": [2, 3]})

        # Act
        message = parser.classify(decode_frame(serialize_message(request.to_wire())))

        # Assert
        assert isinstance(message, Request)
        assert message.id == "req-1"
        assert message.method == "sum"
        assert message.params == {"a": 1, "b": [2, 3]}

    def test_request_without_params_stays_without_params(self):
        # Arrange
        builder = MessageBuilder(id_generator=lambda: 9)
        parser = MessageParser()

        # Act
        wire = builder.build_request("status").to_wire()
        message = parser.classify(wire)

        # Assert
        assert "params" not in wire
        assert isinstance(message, Request)
        assert message.params is None
