"""Print a new API key for ALLOWED_API_KEYS."""

import secrets


def generate_api_key() -> str:
    return secrets.token_hex(32)


if __name__ == "__main__":
    key = generate_api_key()
    print(key)
    print()
    print("Add it to .env:")
    print(f"  ALLOWED_API_KEYS={key}")
