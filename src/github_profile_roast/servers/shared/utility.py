import base64


def decode_content(content: str) -> str:
    """Decode base64 file content from the GitHub contents API. Line breaks in the payload are ignored."""
    return base64.b64decode(content).decode("utf-8")


def mask_secret(text: str, secret: str | None) -> str:
    if not secret:
        return text
    return text.replace(secret, "***")


def preview(text: str, length: int = 100) -> str:
    """Shorten text for log lines."""
    if len(text) <= length:
        return text
    return text[:length] + "..."
