import base64
import hashlib
import string
import uuid

SHORT_CODE_LENGTH = 8

# base64 digits minus '+' and '/', which are not path-safe
ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
_UNSAFE_CHARS = str.maketrans("", "", "+/=")


def new_nonce() -> str:
    return uuid.uuid4().hex


def derive_short_code(url: str, nonce: str, length: int = SHORT_CODE_LENGTH) -> str:
    """Hash url + nonce with SHA-256 and keep the first `length` path-safe base64 characters.

    Returns an empty string in the (practically impossible) case where fewer
    than `length` safe characters survive.
    """
    digest = hashlib.sha256(f"{url}{nonce}".encode("utf-8")).digest()
    encoded = base64.b64encode(digest).decode("ascii").translate(_UNSAFE_CHARS)
    if len(encoded) < length:
        return ""
    return encoded[:length]


def is_valid_short_code(code: str, length: int = SHORT_CODE_LENGTH) -> bool:
    return len(code) == length and all(c in ALPHABET for c in code)
