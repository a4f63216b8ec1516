"""Tests for the users command-line front end."""
import pytest

from scripts import users_cli
from usermirror.core.gorest import TransportError, ValidationError
from usermirror.core.models import UserRecord
from usermirror.core.user_store import UserCollectionStore


@pytest.fixture()
def cli_store(monkeypatch, fake_gateway):
    """Store wired to the interactive confirmation prompt."""
    user_store = UserCollectionStore(fake_gateway, confirm=users_cli.confirm_delete, operator="cli")
    monkeypatch.setattr(users_cli, "build_store", lambda args: user_store)
    return user_store


def test_no_command_prints_help(cli_store, capsys):
    users_cli.main([])
    assert "usage" in capsys.readouterr().out.lower()


def test_list_applies_filter(cli_store, capsys):
    users_cli.main(["list", "--gender", "male"])

    out = capsys.readouterr().out
    assert "Bo" in out
    assert "Ann" not in out


def test_list_load_failure_exits(cli_store, fake_gateway, capsys):
    fake_gateway.failures["list"] = TransportError(0, "Network error", "u")

    with pytest.raises(SystemExit) as exc:
        users_cli.main(["list"])

    assert exc.value.code == 1
    assert "[list] Error: Network error" in capsys.readouterr().err


def test_create_does_not_load_collection(cli_store, fake_gateway, capsys):
    users_cli.main(["create", "--name", "Cy", "--email", "cy@example.com", "--gender", "male"])

    assert fake_gateway.calls[0][0] == "create"
    assert ("list",) not in fake_gateway.calls
    assert "[create] Created user 100" in capsys.readouterr().out


def test_create_reports_field_errors(cli_store, fake_gateway, capsys):
    fake_gateway.failures["create"] = ValidationError(422, "Validation failed", "u", {"email": "has already been taken"})

    with pytest.raises(SystemExit):
        users_cli.main(["create", "--name", "Cy", "--email", "cy@example.com", "--gender", "male"])

    err = capsys.readouterr().err
    assert "email: has already been taken" in err


def test_update_changes_only_given_fields(cli_store, fake_gateway, capsys):
    users_cli.main(["update", "--id", "2", "--status", "active"])

    assert fake_gateway.calls[-1] == (
        "update", 2, {"name": "Bo", "email": "bo@example.com", "gender": "male", "status": "active"}
    )
    assert "[update] Updated user 2" in capsys.readouterr().out


def test_update_unknown_user_exits(cli_store):
    with pytest.raises(SystemExit) as exc:
        users_cli.main(["update", "--id", "99", "--name", "x"])
    assert exc.value.code == 1


def test_delete_with_yes_skips_prompt(cli_store, fake_gateway, monkeypatch, capsys):
    monkeypatch.setattr("builtins.input", lambda prompt="": pytest.fail("prompted"))

    users_cli.main(["delete", "--id", "1", "--yes"])

    assert ("delete", 1) in fake_gateway.calls
    assert [r.id for r in cli_store.records] == [2]
    assert "[delete] Deleted user 1" in capsys.readouterr().out


def test_delete_prompt_declined(cli_store, fake_gateway, monkeypatch, capsys):
    monkeypatch.setattr("builtins.input", lambda prompt="": "n")

    users_cli.main(["delete", "--id", "1"])

    assert ("delete", 1) not in fake_gateway.calls
    assert "[delete] Cancelled" in capsys.readouterr().out


def test_delete_prompt_accepted(cli_store, fake_gateway, monkeypatch):
    monkeypatch.setattr("builtins.input", lambda prompt="": "Y")
    users_cli.main(["delete", "--id", "2"])
    assert ("delete", 2) in fake_gateway.calls


def test_confirm_delete_treats_eof_as_no(monkeypatch, ann_and_bo):
    def _eof(prompt=""):
        raise EOFError

    monkeypatch.setattr("builtins.input", _eof)
    assert users_cli.confirm_delete(UserRecord.from_api(ann_and_bo[0])) is False
