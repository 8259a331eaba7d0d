from __future__ import annotations

from datetime import datetime, timedelta

import jwt
import pytest

from app.clients.token_store import SQLiteTokenStore
from app.core.config import TokenSettings
from app.core.errors import ConfigurationError
from app.services import TokenIssuer, TokenSigner
from app.utils.time import WIRE_FORMAT

from conftest import ISSUER, SIGNING_KEY


def test_issue_creates_linked_records(stack) -> None:
    user = stack.add_user("viewer@example.com")

    issued = stack.issuer.issue_tokens(user.id)

    access = stack.tokens.find_access_token(issued.access_token.id)
    refresh = stack.tokens.find_refresh_token(issued.refresh_token.id)
    assert access is not None and refresh is not None
    assert refresh.access_token_id == access.id
    assert access.user_id == user.id
    assert access.client_id == stack.client_id
    assert access.scopes == ("mobile",)
    assert access.name == "Public Client Token"
    assert not access.revoked and not refresh.revoked


def test_identifiers_are_long_hex_strings(stack) -> None:
    user = stack.add_user("viewer@example.com")

    issued = stack.issuer.issue_tokens(user.id)

    assert len(issued.access_token.id) == 64
    assert len(issued.refresh_token.id) == 80
    int(issued.access_token.id, 16)
    int(issued.refresh_token.id, 16)


def test_lifetimes_follow_settings(stack) -> None:
    user = stack.add_user("viewer@example.com")
    now = stack.clock()

    issued = stack.issuer.issue_tokens(user.id, ["tv"])

    assert issued.access_token.expires_at == now + timedelta(days=15)
    assert issued.refresh_token.expires_at == now + timedelta(days=30)


def test_jwt_claims_reference_the_access_token(stack) -> None:
    user = stack.add_user("viewer@example.com")

    bundle = stack.issuer.issue(user.id, ["tv"])

    claims = jwt.decode(
        bundle.access_token,
        SIGNING_KEY,
        algorithms=["HS256"],
        audience=stack.client_id,
        issuer=ISSUER,
    )
    record = stack.tokens.find_access_token(claims["jti"])
    assert record is not None
    assert claims["user_id"] == user.id
    assert claims["scopes"] == ["tv"]
    assert claims["nbf"] == claims["iat"]
    assert claims["exp"] == int(record.expires_at.timestamp())
    assert bundle.token_type == "Bearer"
    assert stack.tokens.find_refresh_token(bundle.refresh_token) is not None
    assert bundle.expires_at == record.expires_at.strftime(WIRE_FORMAT)
    datetime.strptime(bundle.expires_at, WIRE_FORMAT)


def test_missing_client_is_a_configuration_error(db_path: str, clock) -> None:
    store = SQLiteTokenStore(db_path)
    issuer = TokenIssuer(
        store,
        TokenSigner(key=SIGNING_KEY, issuer=ISSUER),
        TokenSettings(),
        clock=clock,
    )

    with pytest.raises(ConfigurationError, match="OAuth client not found"):
        issuer.issue(1)


def test_revoke_withdraws_the_whole_pair(stack) -> None:
    user = stack.add_user("viewer@example.com")
    issued = stack.issuer.issue_tokens(user.id)

    stack.issuer.revoke(issued.access_token.id)

    assert stack.tokens.find_access_token(issued.access_token.id).revoked
    assert stack.tokens.find_refresh_token(issued.refresh_token.id).revoked
    assert stack.unrevoked_token_ids(user.id) == []
