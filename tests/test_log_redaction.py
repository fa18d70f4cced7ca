from observability.logging import redact


def test_redact_removes_sensitive_keys():
    inp = {
        "api_key": "abc",
        "nested": {"password": "p", "ok": 1},
        "fromPrivateKey": "0x11",
        "items": [{"mnemonic": "word word"}],
        "safe": "x",
    }
    out = redact(inp)
    assert out["api_key"] == "***REDACTED***"
    assert out["nested"]["password"] == "***REDACTED***"
    assert out["fromPrivateKey"] == "***REDACTED***"
    assert out["items"][0]["mnemonic"] == "***REDACTED***"
    assert out["safe"] == "x"
