"""
Token lifecycle: issue, look up, revoke, soft delete.

Tokens are random 32-byte hex strings; only their SHA-256 hash is stored,
so the plaintext is returned once at issue time.
"""
from __future__ import annotations

import hashlib
import logging
import secrets

from ..extensions import db
from ..models import Token, TOKEN_TYPES
from ..validation import NotFoundError, ValidationError
from orderdesk.time_utils import utcnow

logger = logging.getLogger(__name__)


def generate_token() -> str:
    return secrets.token_hex(32)  # 32 bytes = 64 hex characters


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def issue_token(user_id: int, token_type: str = "access") -> tuple[Token, str]:
    if token_type not in TOKEN_TYPES:
        raise ValidationError(f"type must be one of: {', '.join(TOKEN_TYPES)}")

    plaintext = generate_token()
    token = Token(user_id=user_id, token=hash_token(plaintext), type=token_type, is_revoked=False)
    db.session.add(token)
    db.session.commit()
    return token, plaintext


def find_active_token(plaintext: str) -> Token | None:
    """Live, unrevoked token matching the plaintext value."""
    return (
        db.session.query(Token)
        .filter_by(token=hash_token(plaintext), is_revoked=False)
        .filter(Token.live())
        .first()
    )


def revoke_token(plaintext: str) -> Token:
    token = db.session.query(Token).filter_by(token=hash_token(plaintext)).filter(Token.live()).first()
    if not token:
        raise NotFoundError("Token not found")
    token.is_revoked = True
    db.session.commit()
    logger.info("Revoked token %s for user %s", token.id, token.user_id)
    return token


def revoke_user_tokens(user_id: int) -> int:
    """Revoke every live token of a user; returns how many changed."""
    tokens = (
        db.session.query(Token)
        .filter_by(user_id=user_id, is_revoked=False)
        .filter(Token.live())
        .all()
    )
    for token in tokens:
        token.is_revoked = True
    db.session.commit()
    logger.info("Revoked %d token(s) for user %s", len(tokens), user_id)
    return len(tokens)


def delete_token(token_id: int) -> Token:
    token = db.session.query(Token).filter(Token.id == token_id, Token.live()).first()
    if not token:
        raise NotFoundError(f"Token {token_id} not found")
    token.soft_delete()
    db.session.commit()
    return token


def purge_revoked_tokens() -> int:
    """Soft delete all revoked tokens that are still live."""
    now = utcnow()
    tokens = db.session.query(Token).filter_by(is_revoked=True).filter(Token.live()).all()
    for token in tokens:
        token.soft_delete(at=now)
    db.session.commit()
    return len(tokens)
