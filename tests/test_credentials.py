from __future__ import annotations

import pytest

from credentials import (
    EXPIRED_MESSAGE,
    FIRST_TIME_MESSAGE,
    CredentialStore,
    InteractiveRefresh,
)
from errors import CredentialMissingError, PersistenceError


def test_load_missing_file_raises(tmp_path):
    store = CredentialStore(str(tmp_path / "cookie"))

    with pytest.raises(CredentialMissingError):
        store.load()


def test_load_strips_trailing_newline(tmp_path):
    path = tmp_path / "cookie"
    path.write_text("  _session_tid=abc; deviceId=xyz\n", encoding="utf-8")

    assert CredentialStore(str(path)).load() == "_session_tid=abc; deviceId=xyz"


def test_load_empty_file_raises(tmp_path):
    path = tmp_path / "cookie"
    path.write_text("\n", encoding="utf-8")

    with pytest.raises(CredentialMissingError):
        CredentialStore(str(path)).load()


def test_save_creates_directory_and_round_trips(tmp_path):
    store = CredentialStore(str(tmp_path / "nested" / "swiggy-cli" / "cookie"))

    store.save("token-1")
    store.save("token-2")

    assert store.load() == "token-2"


def test_save_failure_is_reported(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x", encoding="utf-8")
    store = CredentialStore(str(blocker / "cookie"))

    with pytest.raises(PersistenceError):
        store.save("token")


def test_clear_is_idempotent(tmp_path):
    store = CredentialStore(str(tmp_path / "cookie"))
    store.save("token")

    store.clear()
    store.clear()

    with pytest.raises(CredentialMissingError):
        store.load()


def test_refresh_first_time_prompt_saves_token(tmp_path):
    store = CredentialStore(str(tmp_path / "cookie"))
    printed = []
    refresh = InteractiveRefresh(
        store,
        input_fn=lambda: "a=1; b=2",
        print_fn=lambda *parts: printed.append(" ".join(str(p) for p in parts)),
    )

    token = refresh(True)

    assert token == "a=1; b=2"
    assert store.load() == "a=1; b=2"
    assert FIRST_TIME_MESSAGE in printed
    assert refresh.prompts == 1


def test_refresh_expired_prompt_keeps_token_verbatim(tmp_path):
    store = CredentialStore(str(tmp_path / "cookie"))
    printed = []
    refresh = InteractiveRefresh(
        store,
        input_fn=lambda: "  \x1b[1mpasted=cookie\x1b[0m  \n",
        print_fn=lambda *parts: printed.append(" ".join(str(p) for p in parts)),
    )

    token = refresh(False)

    assert token == "  \x1b[1mpasted=cookie\x1b[0m  "
    assert EXPIRED_MESSAGE in printed


def test_refresh_empty_input_raises(tmp_path):
    refresh = InteractiveRefresh(
        CredentialStore(str(tmp_path / "cookie")),
        input_fn=lambda: "   ",
        print_fn=lambda *parts: None,
    )

    with pytest.raises(CredentialMissingError):
        refresh(True)


def test_refresh_end_of_input_raises(tmp_path):
    def closed_stdin():
        raise EOFError

    refresh = InteractiveRefresh(
        CredentialStore(str(tmp_path / "cookie")),
        input_fn=closed_stdin,
        print_fn=lambda *parts: None,
    )

    with pytest.raises(CredentialMissingError):
        refresh(True)


def test_refresh_continues_when_save_fails(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x", encoding="utf-8")
    printed = []
    refresh = InteractiveRefresh(
        CredentialStore(str(blocker / "cookie")),
        input_fn=lambda: "in-memory",
        print_fn=lambda *parts: printed.append(" ".join(str(p) for p in parts)),
    )

    assert refresh(False) == "in-memory"
    assert any(line.startswith("⚠") for line in printed)
