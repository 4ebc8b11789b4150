from __future__ import annotations

from pydatalayer._redact import redact_for_log


def _on_change(current: dict, previous: dict) -> None:
    return None


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "data": {"user": {"name": "Sam", "password": "pw", "Token": "abc"}},
        "cookie": "session=1",
    }

    redacted = redact_for_log(payload)
    assert redacted["cookie"] == "<redacted>"
    assert redacted["data"]["user"]["password"] == "<redacted>"
    assert redacted["data"]["user"]["Token"] == "<redacted>"
    assert redacted["data"]["user"]["name"] == "Sam"


def test_redact_for_log_uses_custom_keys() -> None:
    redacted = redact_for_log({"email": "a@b.c", "password": "pw"}, sensitive_keys={"email"})

    assert redacted == {"email": "<redacted>", "password": "pw"}


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_for_log_describes_callables() -> None:
    redacted = redact_for_log({"on": "change", "handler": _on_change, "items": (1, b"\x00\x01")})

    assert redacted["handler"] == "<callable _on_change>"
    assert redacted["items"] == [1, "<bytes:2b>"]
