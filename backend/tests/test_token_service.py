# Overview: Pytest coverage for token issue, revocation and soft delete.

import pytest

from orderdesk.models import Deleted, Token
from orderdesk.services import token_service
from orderdesk.validation import NotFoundError, ValidationError


def test_issue_stores_only_the_hash(db_session, user):
    token, plaintext = token_service.issue_token(user.id, "access")

    stored = db_session.get(Token, token.id)
    assert stored.token == token_service.hash_token(plaintext)
    assert stored.token != plaintext
    assert "token" not in stored.to_dict()
    assert token_service.find_active_token(plaintext).id == token.id


def test_unknown_type_rejected(db_session, user):
    with pytest.raises(ValidationError):
        token_service.issue_token(user.id, "session")


def test_revoke_in_place(db_session, user):
    token, plaintext = token_service.issue_token(user.id, "refresh")

    revoked = token_service.revoke_token(plaintext)

    assert revoked.id == token.id
    assert revoked.is_revoked is True
    assert token_service.find_active_token(plaintext) is None


def test_revoke_unknown_token(db_session):
    with pytest.raises(NotFoundError):
        token_service.revoke_token("not-a-token")


def test_revoke_user_tokens_and_purge(db_session, user):
    token_service.issue_token(user.id, "access")
    token_service.issue_token(user.id, "refresh")

    assert token_service.revoke_user_tokens(user.id) == 2
    assert token_service.revoke_user_tokens(user.id) == 0
    assert token_service.purge_revoked_tokens() == 2
    assert all(t.is_deleted for t in db_session.query(Token).all())


def test_delete_token(db_session, user):
    token, plaintext = token_service.issue_token(user.id)

    deleted = token_service.delete_token(token.id)

    assert isinstance(deleted.deletion, Deleted)
    assert token_service.find_active_token(plaintext) is None
    with pytest.raises(NotFoundError):
        token_service.delete_token(token.id)
