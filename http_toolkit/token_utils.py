import secrets

ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_+"


def random_string(length: int) -> str:
    """Return `length` characters drawn uniformly from ALPHABET using the OS CSPRNG."""
    if length < 0:
        raise ValueError("length must not be negative")
    return "".join(secrets.choice(ALPHABET) for _ in range(length))
