#!/usr/bin/env python3
"""CLI tool to manage admin API keys.

Usage:
    python scripts/generate_api_key.py create [label]
    python scripts/generate_api_key.py list
    python scripts/generate_api_key.py revoke <key-prefix>
"""
import os
import sys

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from hospital_cms.auth import APIKeyManager
from hospital_cms.config import get_settings


def usage():
    print(__doc__.strip())
    sys.exit(1)


def main():
    if len(sys.argv) < 2:
        usage()

    command = sys.argv[1]
    manager = APIKeyManager(database_url=get_settings().admin_database_url)

    if command == "create":
        label = sys.argv[2] if len(sys.argv) > 2 else None
        api_key = manager.generate_api_key(label)

        print("\nAdmin API key generated")
        if label:
            print(f"   Label: {label}")
        print(f"\n   API Key: {api_key}")
        print("\nIMPORTANT: Save this key securely! It cannot be retrieved later.")
        print("\nUsage Example:")
        print("  curl http://localhost:8000/api/doctors \\")
        print(f"    -H 'X-API-Key: {api_key}'\n")

    elif command == "list":
        keys = manager.list_keys()
        if not keys:
            print("No admin API keys.")
        for key in keys:
            state = "active" if key["active"] else "revoked"
            print(f"{key['prefix']}  {state:8}  last used {key['last_used']:%Y-%m-%d %H:%M}  {key['label'] or ''}")

    elif command == "revoke":
        if len(sys.argv) < 3:
            usage()
        if manager.deactivate_prefix(sys.argv[2]):
            print(f"Revoked {sys.argv[2]}")
        else:
            print(f"No key with prefix {sys.argv[2]}")
            sys.exit(1)

    else:
        usage()


if __name__ == "__main__":
    main()
