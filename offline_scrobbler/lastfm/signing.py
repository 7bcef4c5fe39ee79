import hashlib
from collections.abc import Mapping

SIGNATURE_PARAM = "api_sig"


def sign(params: Mapping[str, str], secret: str) -> str:
    """Compute the Last.fm ``api_sig`` for a parameter set.

    Keys are sorted by byte value, each key is followed directly by its value,
    the shared secret is appended and the UTF-8 bytes are MD5 hashed.
    """
    keys = sorted((k for k in params if k != SIGNATURE_PARAM), key=lambda k: k.encode("utf-8"))
    payload = "".join(k + params[k] for k in keys) + secret
    return hashlib.md5(payload.encode("utf-8")).hexdigest()


def signed(params: Mapping[str, str], secret: str) -> dict[str, str]:
    """Return a copy of ``params`` with its signature added."""
    out = dict(params)
    out[SIGNATURE_PARAM] = sign(params, secret)
    return out
