from shift_sync.errors import ConfigurationError

PLACEHOLDER_VALUES = {
    "changeme",
    "placeholder",
    "xxx",
    "undefined",
    "null",
    "none",
    "your_api_key",
    "your-api-key",
    "api_key",
}


def is_placeholder(value: str) -> bool:
    v = value.strip()
    if not v:
        return True
    if v.startswith("<") and v.endswith(">"):
        return True
    upper = v.upper()
    if "YOUR_" in upper or "PLACEHOLDER" in upper:
        return True
    return v.lower() in PLACEHOLDER_VALUES


def require_credential(value: str | None, name: str) -> str:
    """Return the credential, or fail before any network call if it is unusable."""
    if value is None or is_placeholder(value):
        raise ConfigurationError(
            f"Application is not configured correctly. The {name} is missing."
        )
    return value.strip()
