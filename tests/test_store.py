from __future__ import annotations

import json

import pytest

from workstation_agent.exceptions import AuthenticationError, InvalidRequestError, NotFoundError, UserExistsError
from workstation_agent.store import UserStore, validate_password


def _logged_in(store: UserStore) -> str:
    store.signup("bob", "Passw0rdX")
    return store.login("bob", "Passw0rdX")


@pytest.mark.parametrize(
    "password, ok",
    [("Passw0rdX", True), ("short1A", False), ("alllower1", False), ("ALLUPPER1", False), ("NoDigitsHere", False)],
)
def test_validate_password(password, ok) -> None:
    assert validate_password(password) is ok


def test_signup_rejects_weak_password_and_duplicates() -> None:
    store = UserStore()
    with pytest.raises(InvalidRequestError):
        store.signup("bob", "weak")
    with pytest.raises(InvalidRequestError):
        store.signup("", "Passw0rdX")
    store.signup("bob", "Passw0rdX")
    with pytest.raises(UserExistsError):
        store.signup("bob", "Passw0rdY")


def test_login_and_tokens() -> None:
    store = UserStore()
    token = _logged_in(store)
    assert store.authenticate(token) == "bob"

    with pytest.raises(AuthenticationError):
        store.login("bob", "Wrong0pass")
    with pytest.raises(AuthenticationError):
        store.login("nobody", "Passw0rdX")

    store.logout(token)
    with pytest.raises(AuthenticationError):
        store.authenticate(token)
    with pytest.raises(AuthenticationError):
        store.authenticate("")


def test_passwords_are_not_stored_in_plain_text() -> None:
    store = UserStore()
    store.signup("bob", "Passw0rdX")
    assert store._users["bob"].password_hash != "Passw0rdX"


def test_files_save_overwrite_and_delete() -> None:
    store = UserStore()
    _logged_in(store)
    store.save_file("bob", "documents", "a.txt", "one")
    store.save_file("bob", "documents", "a.txt", "two")
    files = store.get_files("bob")
    assert files["documents"]["a.txt"]["content"] == "two"
    assert isinstance(files["documents"]["a.txt"]["modified"], int)
    assert files["images"] == {}

    store.delete_file("bob", "documents", "a.txt")
    assert store.get_files("bob")["documents"] == {}
    with pytest.raises(NotFoundError):
        store.delete_file("bob", "documents", "a.txt")


@pytest.mark.parametrize(
    "file_type, name, content",
    [("videos", "a.mp4", "x"), ("documents", "", "x"), ("documents", "a.txt", None), ("images", 5, "x")],
)
def test_save_file_rejects_invalid_data(file_type, name, content) -> None:
    store = UserStore()
    _logged_in(store)
    with pytest.raises(InvalidRequestError):
        store.save_file("bob", file_type, name, content)


def test_returned_data_is_a_copy() -> None:
    store = UserStore()
    _logged_in(store)
    store.save_file("bob", "documents", "a.txt", "one")
    store.get_files("bob")["documents"]["a.txt"]["content"] = "mutated"
    assert store.get_files("bob")["documents"]["a.txt"]["content"] == "one"


def test_sessions() -> None:
    store = UserStore()
    _logged_in(store)
    with pytest.raises(InvalidRequestError):
        store.save_session("bob", ["not", "a", "dict"])

    first = store.save_session("bob", {"openWindows": [], "chatHistory": []})
    second = store.save_session("bob", {"openWindows": [], "chatHistory": []})
    assert first != second
    assert first.startswith("session_")
    assert set(store.list_sessions("bob")) == {first, second}
    assert store.get_session("bob", first) == {"openWindows": [], "chatHistory": []}

    store.delete_session("bob", first)
    with pytest.raises(NotFoundError):
        store.get_session("bob", first)
    with pytest.raises(NotFoundError):
        store.delete_session("bob", first)


def test_storage_used_counts_files_and_sessions() -> None:
    store = UserStore()
    _logged_in(store)
    empty = store.storage_used("bob")
    store.save_file("bob", "documents", "a.txt", "x" * 1000)
    assert store.storage_used("bob") > empty + 1000

    data = store.export_data("bob")
    assert store.storage_used("bob") == len(json.dumps(data, separators=(",", ":")).encode("utf-8"))
