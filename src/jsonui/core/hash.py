"""Fast hashing for export cache keys."""

import xxhash


def hash_fields(*fields: str) -> str:
    """
    xxhash64 digest of several fields (deterministic).

    Each field is length-prefixed, so `("ab", "")` and `("a", "b")` differ.

    Examples:
        >>> hash_fields(tree_json, data_json, options_json)
        'b4f3c2...'
    """
    hasher = xxhash.xxh64()
    for field in fields:
        data = field.encode("utf-8")
        hasher.update(len(data).to_bytes(8, "big"))
        hasher.update(data)
    return hasher.hexdigest()


__all__ = ["hash_fields"]
