from __future__ import annotations

from datetime import timedelta

import pytest

from app.core.errors import InvalidTokenError
from app.services import TokenSigner


def test_valid_mobile_token_resolves_the_user(stack) -> None:
    user = stack.add_user("viewer@example.com")
    bundle = stack.issuer.issue(user.id)

    principal = stack.validator.validate(bundle.access_token, required_scope="mobile")

    assert principal.user_id == user.id
    assert principal.email == "viewer@example.com"
    assert principal.scopes == ("mobile",)


def test_token_without_required_scope_is_rejected(stack) -> None:
    user = stack.add_user("viewer@example.com")
    bundle = stack.issuer.issue(user.id, ["tv"])

    with pytest.raises(InvalidTokenError):
        stack.validator.validate(bundle.access_token, required_scope="mobile")


def test_revoked_token_is_rejected(stack) -> None:
    user = stack.add_user("viewer@example.com")
    issued = stack.issuer.issue_tokens(user.id)
    stack.issuer.revoke(issued.access_token.id)

    with pytest.raises(InvalidTokenError):
        stack.validator.validate(issued.jwt, required_scope="mobile")


def test_rotated_token_is_rejected(stack) -> None:
    user = stack.add_user("viewer@example.com")
    issued = stack.issuer.issue_tokens(user.id)
    stack.refresher.refresh(issued.refresh_token.id)

    with pytest.raises(InvalidTokenError):
        stack.validator.validate(issued.jwt, required_scope="mobile")


def test_empty_token_is_rejected(stack) -> None:
    with pytest.raises(InvalidTokenError, match="No token provided"):
        stack.validator.validate("", required_scope="mobile")


def test_foreign_signature_is_rejected(stack) -> None:
    user = stack.add_user("viewer@example.com")
    issued = stack.issuer.issue_tokens(user.id)
    forger = TokenSigner(key=b"another-key-of-a-reasonable-length-000", issuer=stack.signer.issuer)
    forged = forger.encode(
        token_id=issued.access_token.id,
        audience=stack.client_id,
        user_id=user.id,
        scopes=["mobile"],
        issued_at=issued.access_token.created_at,
        expires_at=issued.access_token.expires_at,
    )

    with pytest.raises(InvalidTokenError):
        stack.validator.validate(forged, required_scope="mobile")


def test_wrong_audience_is_rejected(stack) -> None:
    user = stack.add_user("viewer@example.com")
    issued = stack.issuer.issue_tokens(user.id)
    token = stack.signer.encode(
        token_id=issued.access_token.id,
        audience="some-other-client",
        user_id=user.id,
        scopes=["mobile"],
        issued_at=issued.access_token.created_at,
        expires_at=issued.access_token.expires_at,
    )

    with pytest.raises(InvalidTokenError):
        stack.validator.validate(token, required_scope="mobile")


def test_expired_jwt_is_rejected(stack) -> None:
    user = stack.add_user("viewer@example.com")
    issued = stack.issuer.issue_tokens(user.id)
    issued_at = issued.access_token.created_at - timedelta(days=20)
    token = stack.signer.encode(
        token_id=issued.access_token.id,
        audience=stack.client_id,
        user_id=user.id,
        scopes=["mobile"],
        issued_at=issued_at,
        expires_at=issued_at + timedelta(days=15),
    )

    with pytest.raises(InvalidTokenError, match="expired"):
        stack.validator.validate(token, required_scope="mobile")


def test_user_claim_must_match_the_record(stack) -> None:
    owner = stack.add_user("viewer@example.com")
    other = stack.add_user("other@example.com")
    issued = stack.issuer.issue_tokens(owner.id)
    token = stack.signer.encode(
        token_id=issued.access_token.id,
        audience=stack.client_id,
        user_id=other.id,
        scopes=["mobile"],
        issued_at=issued.access_token.created_at,
        expires_at=issued.access_token.expires_at,
    )

    with pytest.raises(InvalidTokenError):
        stack.validator.validate(token, required_scope="mobile")
