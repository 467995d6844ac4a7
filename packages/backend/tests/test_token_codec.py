"""Token codec: issue, verify, expiry, kind separation."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from bizdir.auth.jwt import PrincipalKind, TokenError, decode_token, issue_token, verify_token
from bizdir.config import settings


def test_round_trip_preserves_claims():
    token = issue_token(PrincipalKind.AGENT, "a1b2", "AG001", "rahul@example.com")
    payload = verify_token(token, kind=PrincipalKind.AGENT)
    assert payload["sub"] == "a1b2"
    assert payload["code"] == "AG001"
    assert payload["email"] == "rahul@example.com"
    assert payload["kind"] == "agent"


def test_validity_window_is_thirty_days():
    issued = datetime(2026, 1, 1, tzinfo=timezone.utc)
    token = issue_token(PrincipalKind.AGENT, "x", "AG1", "x@example.com", now=issued)
    payload = jwt.decode(
        token, settings.jwt_secret, algorithms=["HS256"], options={"verify_exp": False}
    )
    assert payload["exp"] - payload["iat"] == 30 * 24 * 3600


def test_expired_token_is_invalid():
    issued = datetime.now(timezone.utc) - timedelta(days=31)
    token = issue_token(PrincipalKind.OPERATOR, "x", "OP1", "x@example.com", now=issued)
    assert verify_token(token) is None
    with pytest.raises(TokenError, match="expired"):
        decode_token(token)


def test_wrong_secret_is_invalid():
    token = issue_token(PrincipalKind.AGENT, "x", "AG1", "x@example.com", secret="another-secret-that-is-long-enough-0123456789")
    assert verify_token(token) is None


@pytest.mark.parametrize("garbage", ["", "abc", "a.b.c", "Bearer xyz"])
def test_malformed_token_never_raises(garbage):
    assert verify_token(garbage) is None


def test_token_for_one_portal_rejected_by_another():
    token = issue_token(PrincipalKind.AGENT, "x", "AG1", "x@example.com")
    assert verify_token(token, kind=PrincipalKind.AGENT) is not None
    assert verify_token(token, kind=PrincipalKind.OPERATOR) is None
    assert verify_token(token, kind=PrincipalKind.ADMIN_USER) is None


def test_token_without_kind_claim_rejected():
    token = jwt.encode(
        {"sub": "x", "exp": datetime.now(timezone.utc) + timedelta(days=1)},
        settings.jwt_secret,
        algorithm="HS256",
    )
    assert verify_token(token) is None
