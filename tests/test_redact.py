from __future__ import annotations

from pydantic import BaseModel

from crudstore._redact import redact_for_log


class _Login(BaseModel):
    username: str
    password: str


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "name": "Ada",
        "password": "pw",
        "Authorization": "Bearer abc",
        "nested": {"api_key": "k", "refresh-token": "r", "email": "ada@example.com"},
        "items": [{"token": "t", "id": 1}],
    }

    redacted = redact_for_log(payload)
    assert redacted["name"] == "Ada"
    assert redacted["password"] == "<redacted>"
    assert redacted["Authorization"] == "<redacted>"
    assert redacted["nested"] == {"api_key": "<redacted>", "refresh-token": "<redacted>", "email": "ada@example.com"}
    assert redacted["items"] == [{"token": "<redacted>", "id": 1}]
    assert payload["password"] == "pw"


def test_redact_for_log_dumps_models() -> None:
    assert redact_for_log(_Login(username="ada", password="pw")) == {"username": "ada", "password": "<redacted>"}


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]
