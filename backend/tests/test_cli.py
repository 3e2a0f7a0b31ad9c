# Overview: Pytest coverage for the flask CLI command groups.

from orderdesk.services import token_service


def test_coupon_commands(app, db_session):
    runner = app.test_cli_runner()

    created = runner.invoke(args=["coupons", "create", "--code", "save10", "--recursive"])
    assert created.exit_code == 0, created.output
    assert "SAVE10" in created.output

    duplicate = runner.invoke(args=["coupons", "create", "--code", "SAVE10"])
    assert duplicate.exit_code != 0

    deactivated = runner.invoke(args=["coupons", "deactivate", "save10"])
    assert deactivated.exit_code == 0, deactivated.output

    listed = runner.invoke(args=["coupons", "list"])
    assert "SAVE10 (recursive, inactive)" in listed.output


def test_token_commands(app, db_session, user):
    token_service.issue_token(user.id)
    runner = app.test_cli_runner()

    revoked = runner.invoke(args=["tokens", "revoke-user", "--user-id", str(user.id)])
    assert "Revoked 1 token(s)" in revoked.output

    purged = runner.invoke(args=["tokens", "purge"])
    assert "Soft-deleted 1 revoked token(s)" in purged.output


def test_token_lifecycle_commands(app, db_session, user):
    runner = app.test_cli_runner()

    issued = runner.invoke(args=["tokens", "issue", "--user-id", str(user.id), "--type", "refresh"])
    assert issued.exit_code == 0, issued.output
    plaintext = issued.output.strip().splitlines()[-1]
    token = token_service.find_active_token(plaintext)
    assert token.type == "refresh"

    checked = runner.invoke(args=["tokens", "check", plaintext])
    assert f"Token {token.id} is active" in checked.output

    revoked = runner.invoke(args=["tokens", "revoke", plaintext])
    assert revoked.exit_code == 0, revoked.output
    assert runner.invoke(args=["tokens", "check", plaintext]).exit_code != 0

    deleted = runner.invoke(args=["tokens", "delete", str(token.id)])
    assert deleted.exit_code == 0, deleted.output
    assert runner.invoke(args=["tokens", "delete", str(token.id)]).exit_code != 0


def test_issue_rejects_unknown_type(app, db_session, user):
    result = app.test_cli_runner().invoke(args=["tokens", "issue", "--user-id", str(user.id), "--type", "session"])
    assert result.exit_code != 0
    assert "type must be one of" in result.output
