import secrets
import string

ALPHABET = string.ascii_letters + string.digits
CODE_LENGTH = 6

def generate_random_code(length: int = CODE_LENGTH) -> str:
    """Return a random code; uniqueness is left to the database."""
    return "".join(secrets.choice(ALPHABET) for _ in range(length))
