"""
Unit Tests for the Legacy Handshake
===================================
Canonicalization, keyed-hash signatures and request verification for
jsConnect v1/v2.
"""

import dataclasses
import hashlib
import json

import pytest

from jsconnect.config import JsConnectConfig
from jsconnect.exceptions import InvalidValue
from jsconnect.legacy import (
    ErrorCode,
    HashAlgorithm,
    build_canonical_string,
    build_response,
    check_timestamp_skew,
    get_jsconnect_string,
    hash_value,
    render_response,
    sign_fields,
    stringify,
    url_encode,
    verify_request,
    verify_signed_fields,
)
from jsconnect.models import RequestContext, SsoState

CLIENT_ID = "abc"
SECRET = "s3cret"
NOW = 1700000000

USER = {
    "uniqueid": "123",
    "name": "alice",
    "email": "alice@example.com",
    "photourl": "https://example.com/alice.png",
}


def signed_query(timestamp=NOW, secret=SECRET, algorithm="sha256", **extra):
    query = {
        "client_id": CLIENT_ID,
        "timestamp": str(timestamp),
        "signature": hashlib.new(algorithm, f"{timestamp}{secret}".encode()).hexdigest(),
    }
    query.update(extra)
    return query


def make_config(**overrides):
    options = dict(client_id=CLIENT_ID, secret=SECRET, hash_algorithm="sha256", secure=True, debug=False)
    options.update(overrides)
    return JsConnectConfig(**options)


class TestCanonicalization:
    """Tests for the canonical signing string."""

    def test_url_encode_reserved_characters(self):
        """Should escape ' ! * ( ) and ~ with upper-case hex."""
        assert url_encode("'!*()~") == "%27%21%2A%28%29%7E"
        assert url_encode("a/b:c@d") == "a%2Fb%3Ac%40d"

    def test_url_encode_space_and_unicode(self):
        """Should form-encode spaces and percent-encode UTF-8 bytes."""
        assert url_encode("a b") == "a+b"
        assert url_encode("é") == "%C3%A9"
        assert url_encode("A-z_0.9") == "A-z_0.9"

    def test_stringify(self):
        assert stringify(None) == ""
        assert stringify(True) == "true"
        assert stringify(12) == "12"
        assert stringify(["member", 3]) == "member,3"

    def test_sorted_lower_cased_keys(self):
        """Should sort keys case-insensitively and lower-case them."""
        fields = {"Name": "Bob Smith", "email": "bob@example.com", "UniqueID": 7}

        assert build_canonical_string(fields) == (
            "email=bob%40example.com&name=Bob+Smith&uniqueid=7"
        )

    def test_invariant_under_key_order(self):
        """Should not depend on insertion order."""
        forward = dict(USER)
        backward = dict(reversed(list(USER.items())))

        assert build_canonical_string(forward) == build_canonical_string(backward)

    def test_invariant_under_key_casing(self):
        """Should not depend on key casing."""
        upper = {key.upper(): value for key, value in USER.items()}

        assert build_canonical_string(upper) == build_canonical_string(USER)

    def test_empty_fields(self):
        assert build_canonical_string({}) == ""


class TestSignature:
    """Tests for keyed-hash signatures."""

    @pytest.mark.parametrize("algorithm", ["md5", "sha1", "sha256"])
    def test_hash_value(self, algorithm):
        """Should produce a lower-case hex digest of the UTF-8 bytes."""
        expected = hashlib.new(algorithm, "1700000000s3cret".encode()).hexdigest()

        assert hash_value("1700000000s3cret", algorithm) == expected

    def test_blank_algorithm_is_md5(self):
        assert HashAlgorithm.parse("") is HashAlgorithm.MD5
        assert HashAlgorithm.parse("SHA256") is HashAlgorithm.SHA256

    def test_unknown_algorithm(self):
        with pytest.raises(InvalidValue):
            hash_value("data", "sha512")

    def test_timestamp_skew(self):
        """Should allow at most thirty minutes either way."""
        assert check_timestamp_skew(NOW - 1800, NOW)
        assert check_timestamp_skew(NOW + 1800, NOW)
        assert not check_timestamp_skew(NOW - 1801, NOW)
        assert not check_timestamp_skew(NOW + 1801, NOW)

    def test_sign_fields(self):
        """Should append clientid and the signature of the canonical string."""
        fields = dict(USER)
        signature = sign_fields(fields, CLIENT_ID, SECRET, "sha256")

        expected = hashlib.sha256(
            (build_canonical_string(USER) + SECRET).encode()
        ).hexdigest()
        assert signature == expected
        assert fields["signature"] == expected
        assert fields["clientid"] == CLIENT_ID
        assert "sigStr" not in fields

    def test_sign_fields_debug(self):
        """Should expose the signing string when debugging."""
        fields = {"name": "alice"}
        sign_fields(fields, CLIENT_ID, SECRET, debug=True)

        assert fields["sigStr"] == "name=alice"

    def test_round_trip(self):
        """Should verify what it signs, and reject any change."""
        fields = dict(USER)
        sign_fields(fields, CLIENT_ID, SECRET, "sha1")

        assert verify_signed_fields(fields, SECRET, "sha1")
        assert not verify_signed_fields(fields, SECRET + "x", "sha1")

        tampered = dict(fields, name="mallory")
        assert not verify_signed_fields(tampered, SECRET, "sha1")

    def test_verify_unsigned_fields(self):
        assert not verify_signed_fields({"name": "alice"}, SECRET)


class TestVerifyRequest:
    """Tests for legacy request verification."""

    def verify(self, query, now=NOW, user=None):
        context = RequestContext.from_query(query, now=now)
        return verify_request(context, CLIENT_ID, SECRET, "sha256", user)

    def test_valid_request(self):
        result = self.verify(signed_query())

        assert result.ok
        assert result.whoami is None

    def test_missing_client_id(self):
        result = self.verify({"timestamp": str(NOW)})

        assert result.error.code is ErrorCode.INVALID_REQUEST
        assert result.error.message == "The client_id parameter is missing."

    def test_unknown_client(self):
        result = self.verify(signed_query(client_id="xyz"))

        assert result.error.code is ErrorCode.INVALID_CLIENT
        assert result.error.message == "Unknown client xyz."

    def test_whoami(self):
        """Should disclose name and photo without a signature check."""
        result = self.verify({"client_id": CLIENT_ID}, user=USER)

        assert result.ok
        assert result.whoami == {"name": "alice", "photourl": "https://example.com/alice.png"}

    def test_result_carries_only_error_and_whoami(self):
        """Should expose the outcome through error and whoami alone."""
        result = self.verify({"client_id": CLIENT_ID}, user=USER)

        assert [f.name for f in dataclasses.fields(result)] == ["error", "whoami"]
        assert result.error is None

    def test_whoami_guest(self):
        result = self.verify({"client_id": CLIENT_ID})

        assert result.whoami == {"name": "", "photourl": ""}

    @pytest.mark.parametrize("timestamp", ["", "abc", "0"])
    def test_invalid_timestamp(self, timestamp):
        result = self.verify({"client_id": CLIENT_ID, "timestamp": timestamp, "signature": "x"})

        assert result.error.code is ErrorCode.INVALID_REQUEST
        assert result.error.message == "The timestamp is missing or invalid."

    @pytest.mark.parametrize("timestamp", ["99999999999999999999", "2147483648", "1_700_000_000"])
    def test_out_of_range_timestamp(self, timestamp):
        """Should treat timestamps that do not fit in 32 bits as missing."""
        result = self.verify({"client_id": CLIENT_ID, "timestamp": timestamp, "signature": "x"})

        assert result.error.code is ErrorCode.INVALID_REQUEST
        assert result.error.message == "The timestamp is missing or invalid."

    def test_signature_without_timestamp(self):
        result = self.verify({"client_id": CLIENT_ID, "signature": "x"})

        assert result.error.message == "The timestamp is missing or invalid."

    def test_missing_signature(self):
        result = self.verify({"client_id": CLIENT_ID, "timestamp": str(NOW)})

        assert result.error.code is ErrorCode.INVALID_REQUEST
        assert result.error.message == "The signature is missing."

    @pytest.mark.parametrize("offset", [1801, -1801, 86400])
    def test_stale_timestamp(self, offset):
        """Should reject stale timestamps even with a correct signature."""
        result = self.verify(signed_query(timestamp=NOW - offset))

        assert result.error.code is ErrorCode.INVALID_REQUEST
        assert result.error.message == "The timestamp is invalid."

    def test_wrong_signature(self):
        result = self.verify(signed_query(secret="wrong"))

        assert result.error.code is ErrorCode.ACCESS_DENIED
        assert result.error.message == "Signature invalid."

    def test_wrong_algorithm(self):
        result = self.verify(signed_query(algorithm="md5"))

        assert result.error.code is ErrorCode.ACCESS_DENIED


class TestResponse:
    """Tests for response assembly and rendering."""

    def test_guest_response(self):
        fields = build_response(SsoState.guest(), CLIENT_ID, SECRET)

        assert fields == {"name": "", "photourl": ""}

    def test_authenticated_response_does_not_mutate_profile(self):
        profile = dict(USER)
        fields = build_response(SsoState.authenticated(profile), CLIENT_ID, SECRET, "sha256")

        assert fields["clientid"] == CLIENT_ID
        assert "signature" not in profile

    def test_render_json(self):
        body = render_response({"photourl": "http://x/y.png", "name": "Bob"})

        assert body == '{"name":"Bob","photourl":"http://x/y.png"}'

    def test_render_stringifies_values(self):
        body = render_response({"roles": ["a", "b"], "uniqueid": 5})

        assert json.loads(body) == {"roles": "a,b", "uniqueid": "5"}

    def test_render_jsonp(self):
        body = render_response({"name": "Bob"}, "jsonp123")

        assert body == 'jsonp123({"name":"Bob"})'

    def test_render_jsonp_namespaced_callback(self):
        body = render_response({"name": "Bob"}, "jQuery.cb_1$")

        assert body == 'jQuery.cb_1$({"name":"Bob"})'

    @pytest.mark.parametrize("callback", ["alert(1)//", "a;b", "", "cb</script>", "x y"])
    def test_render_rejects_unsafe_callback(self, callback):
        """Should refuse callbacks with characters outside identifiers and dots."""
        with pytest.raises(InvalidValue):
            render_response({"name": "Bob"}, callback)


class TestGetJsConnectString:
    """End-to-end tests for the legacy handshake."""

    def test_signed_request(self):
        """Should return the signed profile for a valid request."""
        body = get_jsconnect_string(USER, signed_query(), make_config(), now=NOW)
        data = json.loads(body)

        expected_signature = hashlib.sha256(
            (build_canonical_string(USER) + SECRET).encode()
        ).hexdigest()
        assert data["name"] == "alice"
        assert data["clientid"] == CLIENT_ID
        assert data["signature"] == expected_signature

    def test_signed_request_querystring(self):
        """Should accept a raw querystring."""
        query = "&".join(f"{key}={value}" for key, value in signed_query().items())
        data = json.loads(get_jsconnect_string(USER, query, make_config(), now=NOW))

        assert data["clientid"] == CLIENT_ID

    def test_whoami(self):
        user = {"name": "Bob", "photourl": "http://x/y.png", "email": "bob@example.com"}
        body = get_jsconnect_string(user, {"client_id": CLIENT_ID}, make_config(), now=NOW)

        assert body == '{"name":"Bob","photourl":"http://x/y.png"}'

    def test_guest(self):
        body = get_jsconnect_string(None, signed_query(), make_config(), now=NOW)

        assert json.loads(body) == {"name": "", "photourl": ""}

    def test_error_has_no_profile(self):
        """Should render errors without leaking any profile fields."""
        body = get_jsconnect_string(USER, signed_query(secret="wrong"), make_config(), now=NOW)

        assert json.loads(body) == {"error": "access_denied", "message": "Signature invalid."}

    def test_error_jsonp(self):
        query = signed_query(timestamp=NOW - 3600, callback="cb")
        body = get_jsconnect_string(USER, query, make_config(), now=NOW)

        assert body.startswith("cb(") and body.endswith(")")
        assert json.loads(body[3:-1])["error"] == "invalid_request"

    def test_unsafe_callback(self):
        """Should answer an unsafe callback with a plain JSON error."""
        query = signed_query(callback="x(document.cookie);y")
        body = get_jsconnect_string(USER, query, make_config(), now=NOW)

        assert json.loads(body) == {
            "error": "invalid_request",
            "message": "The callback parameter is invalid.",
        }

    def test_debug_adds_signing_string(self):
        body = get_jsconnect_string(USER, signed_query(), make_config(debug=True), now=NOW)

        assert json.loads(body)["sigStr"] == build_canonical_string(USER)

    def test_insecure_mode_skips_verification(self):
        """Should sign the profile without checking the request."""
        body = get_jsconnect_string(USER, {}, make_config(secure=False), now=NOW)
        data = json.loads(body)

        assert data["clientid"] == CLIENT_ID
        assert "error" not in data

    def test_request_context(self):
        context = RequestContext.from_query(signed_query(), now=NOW)
        data = json.loads(get_jsconnect_string(USER, context, make_config()))

        assert data["clientid"] == CLIENT_ID

    def test_invalid_hash_configuration(self):
        """Should raise for a misconfigured algorithm rather than render it."""
        with pytest.raises(InvalidValue):
            get_jsconnect_string(USER, signed_query(), make_config(hash_algorithm="crc32"), now=NOW)
