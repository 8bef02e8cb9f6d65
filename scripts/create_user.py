#!/usr/bin/env python3
"""
Script to create a verified account interactively, skipping the OTP flow.

Usage:
    python scripts/create_user.py
    python scripts/create_user.py alice --email alice@example.org
"""

import argparse
import getpass
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from baatcheet.config import load_config
from baatcheet.auth import AccountStore, PasswordHandler, normalize_email


def main():
    parser = argparse.ArgumentParser(description="Create a verified account")
    parser.add_argument("username", nargs="?", help="Username (3-30 chars)")
    parser.add_argument("--email", "-e", help="Account email")
    args = parser.parse_args()

    config = load_config()
    store = AccountStore(
        file_path=config.storage.accounts_file,
        password_handler=PasswordHandler(rounds=config.storage.bcrypt_rounds)
    )

    username = (args.username or input("Username: ")).strip()
    if not 3 <= len(username) <= 30:
        print("❌ Username must be 3-30 characters!")
        sys.exit(1)

    email = normalize_email(args.email or input("Email: "))
    if "@" not in email:
        print(f"❌ Invalid email: {email}")
        sys.exit(1)

    password = getpass.getpass("Enter password: ")
    confirm = getpass.getpass("Confirm password: ")

    if password != confirm:
        print("❌ Passwords do not match!")
        sys.exit(1)

    if len(password) < 6:
        print("❌ Password must be at least 6 characters!")
        sys.exit(1)

    try:
        account = store.create_account(
            username=username,
            email=email,
            password=password,
            is_verified=True
        )
    except ValueError as e:  # duplicate account or password over 72 bytes
        print(f"❌ {e}")
        sys.exit(1)

    print()
    print("✅ Account created successfully!")
    print(f"   Username: {account.username}")
    print(f"   Email: {account.email}")
    print(f"   Account ID: {account.account_id}")


if __name__ == "__main__":
    main()
