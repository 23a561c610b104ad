"""Cache key derivation for vended credentials.

Keys are SHA-256 digests over the caller identity, the resource type and,
for parameterized operations, a canonical form of the parameters. The raw
auth token therefore never appears in a key, and keys can be logged.
"""

import hashlib
import json
from typing import Any, Mapping, Optional

from .errors import CacheKeyError

# Component separator, cannot occur in namespaces or endpoint paths
SEPARATOR = "\x00"


def _canonical_params(params: Mapping[str, Any]) -> str:
    try:
        return json.dumps(dict(params), sort_keys=True, separators=(",", ":"), default=str)
    except (TypeError, ValueError) as e:
        raise CacheKeyError(f"Cannot derive cache key from parameters: {e}", cause=e)


def derive_key(
    namespace: str,
    auth_token: str,
    discriminator: str,
    params: Optional[Mapping[str, Any]] = None,
) -> str:
    """
    Derive the cache key for one credential slot.

    The same inputs always yield the same key; changing any input yields a
    different key.

    Args:
        namespace: Caller namespace
        auth_token: Caller auth token
        discriminator: Resource type tag, usually the endpoint path
        params: Distinguishing parameters of a parameterized operation

    Returns:
        Hex digest usable as an opaque cache key

    Raises:
        CacheKeyError: If a component is empty or parameters are not serializable
    """
    for name, value in (
        ("namespace", namespace),
        ("auth_token", auth_token),
        ("discriminator", discriminator),
    ):
        if not isinstance(value, str) or not value:
            raise CacheKeyError(f"Cache key component '{name}' must be a non-empty string")

    components = [namespace, auth_token, discriminator]
    if params:
        components.append(_canonical_params(params))

    return hashlib.sha256(SEPARATOR.join(components).encode("utf-8")).hexdigest()
