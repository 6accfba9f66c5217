from typing import Optional

MIN_LENGTH = 6


def validate_credentials(username: str, password: str, confirm: Optional[str] = None) -> Optional[str]:
    """Returns the first problem with the form, or None if it can be sent."""
    if not username:
        return "Username is a required field"
    if len(username) < MIN_LENGTH:
        return f"Username must be at least {MIN_LENGTH} characters"
    if not password:
        return "Password is a required field"
    if len(password) < MIN_LENGTH:
        return f"Password must be at least {MIN_LENGTH} characters"
    if confirm is not None and confirm != password:
        return "Passwords do not match"
    return None
