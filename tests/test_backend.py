import base64

import pytest

from backend.app import create_app
from core import base32

RFC4226_KEY = "12345678901234567890"
RFC4226_B32 = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


def test_index_lists_endpoints(client):
    response = client.get("/")
    assert response.status_code == 200
    data = response.get_json()
    assert data["issuer"] == "TestIssuer"
    assert data["decode_policy"] == "lenient"
    assert {"/encode", "/decode", "/pin", "/verify", "/qr_code"} <= set(data["endpoints"])


def test_cors_header(client):
    response = client.get("/", headers={"Origin": "http://frontend.example"})
    # flask-cors answers a wildcard config with "*" or by echoing the origin
    assert response.headers.get("Access-Control-Allow-Origin") in ("*", "http://frontend.example")


@pytest.mark.parametrize("origin,allowed", [
    ("http://a.example", "http://a.example"),
    ("http://b.example", "http://b.example"),
    ("http://evil.example", None),
])
def test_cors_restricted_origins(origin, allowed):
    client = create_app({"TESTING": True, "CORS_ORIGINS": "http://a.example, http://b.example"}).test_client()
    response = client.get("/", headers={"Origin": origin})
    assert response.headers.get("Access-Control-Allow-Origin") == allowed


def test_unknown_decode_policy_fails_at_startup():
    with pytest.raises(ValueError):
        create_app({"DECODE_POLICY": "sloppy"})


# --- /encode, /decode --------------------------------------------------------
@pytest.mark.parametrize("body,expected", [
    ({"text": "foobar"}, "MZXW6YTBOI"),
    ({"text": "foobar", "padded": True}, "MZXW6YTBOI======"),
    ({"hex": "666f6f"}, "MZXW6"),
    ({"text": ""}, ""),
])
def test_encode(client, body, expected):
    response = client.post("/encode", json=body)
    assert response.status_code == 200
    assert response.get_json() == {"encoded": expected}


@pytest.mark.parametrize("body", [{}, {"hex": "zz"}])
def test_encode_bad_request(client, body):
    response = client.post("/encode", json=body)
    assert response.status_code == 400
    assert "error" in response.get_json()


def test_encode_requires_json(client):
    response = client.post("/encode", data="foobar")
    assert response.status_code == 400


def test_decode(client):
    response = client.post("/decode", json={"encoded": "mzxw-6ytb-oi=="})
    assert response.status_code == 200
    assert response.get_json() == {"hex": "666f6f626172", "text": "foobar"}


def test_decode_binary_has_no_text(client):
    response = client.post("/decode", json={"encoded": "74"})
    assert response.get_json() == {"hex": "ff"}


def test_decode_invalid_character(client):
    response = client.post("/decode", json={"encoded": "ABC!EFG"})
    assert response.status_code == 400
    data = response.get_json()
    assert data["type"] == "InvalidCharacter"
    assert "!" in data["error"]


def test_decode_strict_flag(client):
    assert client.post("/decode", json={"encoded": "MZXW6YTBOJ"}).status_code == 200
    response = client.post("/decode", json={"encoded": "MZXW6YTBOJ", "strict": True})
    assert response.status_code == 400
    assert response.get_json()["type"] == "TrailingBitsError"


@pytest.mark.parametrize("strict,status", [
    ("false", 200),
    ("False", 200),
    ("0", 200),
    ("true", 400),
    ("yes", 400),
    (False, 200),
])
def test_decode_strict_flag_string_forms(client, strict, status):
    response = client.post("/decode", json={"encoded": "MZXW6YTBOJ", "strict": strict})
    assert response.status_code == status


@pytest.mark.parametrize("strict", ["maybe", 1, None, []])
def test_decode_strict_flag_rejects_non_booleans(client, strict):
    response = client.post("/decode", json={"encoded": "MZXW6YTBOJ", "strict": strict})
    assert response.status_code == 400
    assert "strict" in response.get_json()["error"]


def test_decode_strict_policy_from_config():
    client = create_app({"TESTING": True, "DECODE_POLICY": "strict"}).test_client()
    assert client.post("/decode", json={"encoded": "MZXW6YTBOJ"}).status_code == 400
    assert client.post("/decode", json={"encoded": "MZXW6YTBOJ", "strict": False}).status_code == 200


def test_decode_missing_field(client):
    assert client.post("/decode", json={}).status_code == 400


# --- /generate_secret ---------------------------------------------------------
def test_generate_secret(client):
    response = client.post("/generate_secret", json={"length": 16})
    assert response.status_code == 200
    data = response.get_json()
    assert len(data["secret"]) == 16
    assert base32.decode(data["encoded"]) == data["secret"].encode()


def test_generate_secret_without_body(client):
    response = client.post("/generate_secret")
    assert response.status_code == 200
    assert len(response.get_json()["secret"]) == 10


@pytest.mark.parametrize("length", [0, "x", None, 1025, 10**9])
def test_generate_secret_bad_length(client, length):
    assert client.post("/generate_secret", json={"length": length}).status_code == 400


# --- /pin, /verify -------------------------------------------------------------
def test_pin_with_epoch_timestamp(client):
    response = client.post("/pin", json={"secret": RFC4226_KEY, "timestamp": 59})
    assert response.status_code == 200
    assert response.get_json() == {"pin": "287082", "counter": 1, "remaining": 1}


def test_pin_with_iso_timestamp_and_base32(client):
    body = {"base32": RFC4226_B32.lower(), "timestamp": "1970-01-01T00:00:00+00:00"}
    response = client.post("/pin", json=body)
    assert response.get_json()["pin"] == "755224"


def test_pin_defaults_to_now(client, frozen_time):
    frozen_time(30 * 9)
    data = client.post("/pin", json={"secret": RFC4226_KEY}).get_json()
    assert data["pin"] == "520489"
    assert data["remaining"] == 30


@pytest.mark.parametrize("body,error_type", [
    ({"secret": ""}, "EmptySecret"),
    ({"base32": "===="}, "EmptySecret"),
    ({"base32": "GEZD!"}, "InvalidCharacter"),
    ({"secret": "x", "timestamp": "1970-01-01T00:00:00"}, "NaiveTimestamp"),
    ({"secret": "x", "timestamp": -31}, "CounterOutOfRange"),
])
def test_pin_engine_errors(client, body, error_type):
    response = client.post("/pin", json=body)
    assert response.status_code == 400
    assert response.get_json()["type"] == error_type


@pytest.mark.parametrize("body", [
    {},
    {"timestamp": 0},
    {"secret": "x", "timestamp": "yesterday"},
])
def test_pin_bad_request(client, body):
    response = client.post("/pin", json=body)
    assert response.status_code == 400


def test_verify(client):
    body = {"secret": RFC4226_KEY, "timestamp": 59}
    assert client.post("/verify", json={**body, "pin": "287082"}).get_json() == {"valid": True}
    assert client.post("/verify", json={**body, "pin": "755224"}).get_json() == {"valid": False}


def test_verify_base32_secret(client):
    body = {"base32": RFC4226_B32, "pin": "520489", "timestamp": 270}
    assert client.post("/verify", json=body).get_json()["valid"] is True


def test_verify_requires_pin(client):
    assert client.post("/verify", json={"secret": RFC4226_KEY}).status_code == 400


# --- provisioning ---------------------------------------------------------------
def test_otpauth_uri(client):
    response = client.get("/otpauth_uri", query_string={"label": "alice@example.com", "secret": "abc"})
    assert response.status_code == 200
    assert response.get_json()["uri"] == "otpauth://totp/alice%40example.com?secret=MFRGG&issuer=TestIssuer"


def test_otpauth_uri_custom_issuer(client):
    response = client.get("/otpauth_uri", query_string={"label": "bob", "secret": "abc", "issuer": "Acme"})
    assert response.get_json()["uri"].endswith("&issuer=Acme")


def test_otpauth_uri_requires_label_and_secret(client):
    assert client.get("/otpauth_uri", query_string={"label": "bob"}).status_code == 400


def test_qr_code(client):
    response = client.get("/qr_code", query_string={"label": "bob", "secret": "abc"})
    assert response.status_code == 200
    data = response.get_json()
    prefix = "data:image/png;base64,"
    assert data["qr_code"].startswith(prefix)
    assert base64.b64decode(data["qr_code"][len(prefix):]).startswith(b"\x89PNG")
    assert data["uri"] == "otpauth://totp/bob?secret=MFRGG&issuer=TestIssuer"


# --- text that cannot be UTF-8 encoded -------------------------------------------
@pytest.mark.parametrize("path,body", [
    ("/verify", '{"secret": "abc", "pin": "\\ud800"}'),
    ("/verify", '{"secret": "\\udfff", "pin": "123456"}'),
    ("/encode", '{"text": "\\ud800"}'),
    ("/pin", '{"secret": "a\\ud800b"}'),
])
def test_lone_surrogate_is_bad_request(client, path, body):
    response = client.post(path, data=body, content_type="application/json")
    assert response.status_code == 400
    assert response.get_json()["type"] == "InvalidText"
