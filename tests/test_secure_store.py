from __future__ import annotations

from simpananku.services.secure_store import SecureStore


def test_values_round_trip_across_instances(tmp_path) -> None:
    SecureStore(tmp_path).set_item("sb-ref-auth-token", '{"access_token": "AAA"}')

    assert SecureStore(tmp_path).get_item("sb-ref-auth-token") == '{"access_token": "AAA"}'


def test_values_are_not_stored_in_plain_text(tmp_path) -> None:
    SecureStore(tmp_path).set_item("token", "super-secret-refresh-token")

    for path in tmp_path.glob("*.bin"):
        assert b"super-secret-refresh-token" not in path.read_bytes()
        assert b"token" not in path.name.encode()


def test_missing_and_removed_items(tmp_path) -> None:
    store = SecureStore(tmp_path)
    assert store.get_item("nope") is None

    store.set_item("k", "v")
    store.remove_item("k")
    store.remove_item("k")

    assert store.get_item("k") is None


def test_unreadable_value_is_discarded(tmp_path) -> None:
    store = SecureStore(tmp_path)
    store.set_item("k", "v")
    store._path_for("k").write_bytes(b"garbage")

    assert store.get_item("k") is None
    assert not store._path_for("k").exists()
