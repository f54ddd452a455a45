from __future__ import annotations

import json

import pytest

from onboarding.cli import main
from onboarding.core.crypto import generate_store_key_bytes, write_store_key
from onboarding.core.keys import derive_key_pair_from_mnemonic


def _config(tmp_path, backend: str = "memory") -> str:  # noqa: ANN001
    path = tmp_path / "onboarding.json"
    path.write_text(
        json.dumps(
            {
                "store": {"backend": backend, "key_path": str(tmp_path / "store.key"), "store_path": str(tmp_path / "state.enc")},
                "linking": {"poll_interval_seconds": 0.0, "max_poll_attempts": 1},
                "logging": {"log_dir": str(tmp_path / "logs")},
            }
        ),
        encoding="utf-8",
    )
    return str(path)


def _json_out(capsys) -> dict:  # noqa: ANN001
    return json.loads(capsys.readouterr().out)


def test_generate_prints_phrase(tmp_path, capsys):
    assert main(["--config", _config(tmp_path), "generate"]) == 0
    assert len(capsys.readouterr().out.split()) == 13


def test_derive_prints_account_id(tmp_path, capsys, alice_phrase):
    assert main(["--config", _config(tmp_path), "derive", "--phrase", alice_phrase]) == 0
    out = _json_out(capsys)
    assert out["account_id"] == derive_key_pair_from_mnemonic(alice_phrase, "english").account_id


def test_register_with_phrase(tmp_path, capsys, alice_phrase):
    assert main(["--config", _config(tmp_path), "register", "--name", "Alice", "--phrase", alice_phrase]) == 0
    out = _json_out(capsys)
    assert out["state"] == "REGISTERED"
    assert out["account_id"] == derive_key_pair_from_mnemonic(alice_phrase, "english").account_id
    assert "recovery_password" not in out


def test_register_generates_phrase(tmp_path, capsys):
    assert main(["--config", _config(tmp_path), "register", "--name", "Alice"]) == 0
    out = _json_out(capsys)
    assert out["account_id"] == derive_key_pair_from_mnemonic(out["recovery_password"], "english").account_id


def test_link_without_remote_name_uses_given_name(tmp_path, capsys, alice_phrase):
    assert main(["--config", _config(tmp_path), "link", "--phrase", alice_phrase, "--name", "Alice"]) == 0
    out = _json_out(capsys)
    assert out["display_name"] is None
    assert out["state"] == "REGISTERED"


def test_link_without_any_name_stays_pending(tmp_path, capsys, alice_phrase):
    assert main(["--config", _config(tmp_path), "link", "--phrase", alice_phrase]) == 0
    assert _json_out(capsys)["state"] == "PENDING_LINKING"


def test_invalid_phrase_is_reported(tmp_path, capsys):
    code = main(["--config", _config(tmp_path), "register", "--name", "Alice", "--phrase", "not a real recovery password at all one two three four five"])
    assert code == 2
    assert capsys.readouterr().err.startswith("error: ")


def test_encrypted_store_persists_between_runs(tmp_path, capsys, alice_phrase):
    cfg = _config(tmp_path, backend="encrypted")
    write_store_key(str(tmp_path / "store.key"), generate_store_key_bytes())

    assert main(["--config", cfg, "status"]) == 0
    assert _json_out(capsys)["state"] == "UNREGISTERED"

    assert main(["--config", cfg, "register", "--name", "Alice", "--phrase", alice_phrase]) == 0
    capsys.readouterr()

    assert main(["--config", cfg, "status"]) == 0
    assert _json_out(capsys)["state"] == "REGISTERED"
    assert (tmp_path / "logs" / "events" / "core_events.jsonl").exists()


def test_encrypted_store_without_key_fails(tmp_path, capsys, alice_phrase):
    cfg = _config(tmp_path, backend="encrypted")
    assert main(["--config", cfg, "register", "--name", "Alice", "--phrase", alice_phrase]) == 2
    assert "store key" in capsys.readouterr().err


def test_subcommand_required(tmp_path):
    with pytest.raises(SystemExit):
        main(["--config", _config(tmp_path)])


def test_commands_are_audited_with_trace_id(tmp_path, capsys, alice_phrase):
    cfg = _config(tmp_path)
    assert main(["--config", cfg, "register", "--name", "Alice", "--phrase", alice_phrase]) == 0
    assert main(["--config", cfg, "register", "--name", "Alice", "--phrase", "bogus"]) == 2
    capsys.readouterr()

    lines = (tmp_path / "logs" / "audit.jsonl").read_text(encoding="utf-8").splitlines()
    first, second = (json.loads(x) for x in lines)
    assert first["action"] == "cli.register"
    assert first["details"] == {"exit_code": 0}
    assert first["trace_id"]
    assert second["details"]["exit_code"] == 2
    assert second["details"]["error"]["code"] == "invalid_word"
    assert alice_phrase not in lines[0]
