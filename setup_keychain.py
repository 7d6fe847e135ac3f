#!/usr/bin/env python3
"""
Setup script to securely store the GitHub token used by the Terraform Docs MCP
server in the local system keyring (macOS Keychain, Windows Credential Manager,
Linux Secret Service).

A token raises the GitHub API rate limits the server works under. The server
reads GITHUB_TOKEN from the environment first and falls back to the keyring.

Usage:
    python3 setup_keychain.py            # store a token
    python3 setup_keychain.py verify     # show where a token is configured
    python3 setup_keychain.py delete     # remove the stored token
"""

import getpass
import os
import sys

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from core.config import KEYRING_SERVICE, KEYRING_USERNAME


def _banner(title):
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)
    print()


def setup_local_keyring(token=None):
    """Securely store the GitHub token in the local system keyring."""
    _banner("Local Keyring Setup - GitHub token")

    if token is None:
        token = getpass.getpass("Enter your GitHub token (input will be hidden): ")
    token = token.strip()

    if not token:
        print("❌ Error: token cannot be empty")
        return False

    try:
        keyring.set_password(KEYRING_SERVICE, KEYRING_USERNAME, token)
    except KeyringError as e:
        print(f"❌ Error storing in local keyring: {e}")
        return False

    print("✅ Successfully stored GitHub token in local keyring!")
    print(f"   Service: {KEYRING_SERVICE}")
    print(f"   Username: {KEYRING_USERNAME}")
    print(f"   Backend: {keyring.get_keyring().__class__.__name__}")
    print()
    return True


def verify_setup():
    """Report which credential sources currently provide a token."""
    _banner("Checking Credential Storage")

    found = []
    try:
        if keyring.get_password(KEYRING_SERVICE, KEYRING_USERNAME):
            print("  ✅ Found in local keyring")
            found.append("keyring")
    except KeyringError as e:
        print(f"  ⚠️  Local keyring unavailable: {e}")

    if os.getenv("GITHUB_TOKEN"):
        print("  ✅ Found in environment (GITHUB_TOKEN)")
        found.append("environment")

    if not found:
        print("  ❌ Not found (the server will use anonymous rate limits)")
    elif len(found) > 1:
        print("  ℹ️  GITHUB_TOKEN takes precedence over the keyring")
    return found


def delete_token():
    """Remove the stored token from the local keyring."""
    try:
        keyring.delete_password(KEYRING_SERVICE, KEYRING_USERNAME)
    except PasswordDeleteError:
        print("❌ No GitHub token stored in local keyring")
        return False
    except KeyringError as e:
        print(f"❌ Error removing token from local keyring: {e}")
        return False
    print("✅ Removed GitHub token from local keyring")
    return True


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    command = argv[0] if argv else "store"

    if command == "verify":
        verify_setup()
        return 0
    if command == "delete":
        return 0 if delete_token() else 1
    if command == "store":
        return 0 if setup_local_keyring() else 1

    print(f"❌ Invalid command: {command} (expected store, verify or delete)")
    return 1


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\nExiting...")
        sys.exit(0)
