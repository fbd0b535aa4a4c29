"""Tests for token persistence."""

import stat

from rolegate.tokens import FileTokenStore, TokenPair, get_rolegate_dir, get_token_path


def test_file_store_round_trip_with_owner_only_permissions(tmp_path):
    store = FileTokenStore(tmp_path / "session.json")
    assert store.load() is None

    store.save(TokenPair("a", "r"))

    assert store.load() == TokenPair("a", "r")
    assert stat.S_IMODE(store.path.stat().st_mode) == 0o600


def test_clear_is_idempotent(tmp_path):
    store = FileTokenStore(tmp_path / "session.json")
    store.save(TokenPair("a", "r"))

    store.clear()
    store.clear()

    assert store.load() is None
    assert not store.path.exists()


def test_corrupt_file_reads_as_no_tokens(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("{not json", encoding="utf-8")
    assert FileTokenStore(path).load() is None

    path.write_text('{"access_token": "a"}', encoding="utf-8")
    assert FileTokenStore(path).load() is None


def test_default_location_under_home(tmp_path):
    directory = get_rolegate_dir(tmp_path)

    assert directory == tmp_path / ".rolegate"
    assert directory.is_dir()
    assert get_token_path(tmp_path) == directory / "session.json"
