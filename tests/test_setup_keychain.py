import pytest
from keyring.errors import PasswordDeleteError

import setup_keychain
from core.config import KEYRING_SERVICE, KEYRING_USERNAME, resolve_github_token


class MemoryKeyring:
    def __init__(self):
        self.passwords = {}

    def set_password(self, service, username, password):
        self.passwords[(service, username)] = password

    def get_password(self, service, username):
        return self.passwords.get((service, username))

    def delete_password(self, service, username):
        if (service, username) not in self.passwords:
            raise PasswordDeleteError("not found")
        del self.passwords[(service, username)]


@pytest.fixture
def store(monkeypatch):
    memory = MemoryKeyring()
    for name in ("set_password", "get_password", "delete_password"):
        monkeypatch.setattr(setup_keychain.keyring, name, getattr(memory, name))
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    return memory


def test_stored_token_is_what_the_server_reads(store):
    assert setup_keychain.setup_local_keyring("  ghp_example  ")
    assert store.passwords == {(KEYRING_SERVICE, KEYRING_USERNAME): "ghp_example"}
    assert resolve_github_token() == "ghp_example"


def test_empty_token_is_rejected(store):
    assert not setup_keychain.setup_local_keyring("   ")
    assert store.passwords == {}


def test_verify_reports_sources(store, monkeypatch):
    assert setup_keychain.verify_setup() == []
    store.set_password(KEYRING_SERVICE, KEYRING_USERNAME, "t")
    monkeypatch.setenv("GITHUB_TOKEN", "env")
    assert setup_keychain.verify_setup() == ["keyring", "environment"]


def test_delete(store):
    assert setup_keychain.main(["delete"]) == 1
    store.set_password(KEYRING_SERVICE, KEYRING_USERNAME, "t")
    assert setup_keychain.main(["delete"]) == 0
    assert store.passwords == {}


def test_unknown_command(store):
    assert setup_keychain.main(["rotate"]) == 1
