from __future__ import annotations

import math
import re
from collections import Counter

ENCODED_CHARS_RE = re.compile(r"[A-Za-z0-9+/=_-]+")
ENCODED_MIN_LENGTH = 20
ENCODED_MIN_ALNUM_RATIO = 0.9


def shannon_entropy(value: str) -> float:
    if not value:
        return 0.0
    counts = Counter(value)
    total = len(value)
    entropy = 0.0
    for count in counts.values():
        p = count / total
        entropy -= p * math.log2(p)
    return float(entropy)


def _labels(query_name: str) -> list[str]:
    if query_name.endswith("."):
        query_name = query_name[:-1]
    return query_name.split(".")


def extract_base_domain(query_name: str) -> str:
    """Last two labels of a name: ``a.b.example.com`` -> ``example.com``.

    This is a simplification of the registrable domain and ignores public
    suffixes such as ``co.uk``.
    """
    if not query_name:
        return ""
    labels = _labels(query_name)
    if len(labels) < 2:
        return query_name
    return ".".join(labels[-2:])


def extract_subdomain(query_name: str) -> str:
    if not query_name:
        return ""
    labels = _labels(query_name)
    if len(labels) <= 2:
        return ""
    return ".".join(labels[:-2])


def looks_encoded(value: str) -> bool:
    """True for base64/base32/hex-looking strings of a useful length."""
    if len(value) < ENCODED_MIN_LENGTH:
        return False
    if not ENCODED_CHARS_RE.fullmatch(value):
        return False
    alnum = sum(ch.isalnum() for ch in value)
    return alnum / len(value) > ENCODED_MIN_ALNUM_RATIO
