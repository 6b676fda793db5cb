import hashlib
from typing import Callable, Dict

HashFunction = Callable[[str], int]

# Large prime that leaves room for one multiplication without overflowing 64 bits.
POLY_MOD = 1_000_000_007

DEFAULT_HASH = "sha256"


def sha256_hash(key: str) -> int:
    return int(hashlib.sha256(key.encode("utf-8")).hexdigest(), 16)


def md5_hash(key: str) -> int:
    return int(hashlib.md5(key.encode("utf-8")).hexdigest(), 16)


def polynomial_hash(base: int) -> HashFunction:
    """Rolling hash ``h = (base * h + c) mod POLY_MOD`` over the UTF-16 code units of a key.

    Characters outside the Basic Multilingual Plane contribute both surrogate units.
    """

    def _hash(key: str) -> int:
        data = key.encode("utf-16-be", "surrogatepass")
        h = 0
        for i in range(0, len(data), 2):
            unit = (data[i] << 8) | data[i + 1]
            h = (base * h % POLY_MOD + unit) % POLY_MOD
        return h

    _hash.__name__ = f"hash{base}"
    return _hash


hash31 = polynomial_hash(31)
hash17 = polynomial_hash(17)

HASH_FUNCTIONS: Dict[str, HashFunction] = {
    "sha256": sha256_hash,
    "md5": md5_hash,
    "hash31": hash31,
    "hash17": hash17,
}


def get_hash_function(name: str) -> HashFunction:
    try:
        return HASH_FUNCTIONS[name]
    except KeyError:
        raise ValueError(f"unknown hash function {name!r}, expected one of {sorted(HASH_FUNCTIONS)}") from None
