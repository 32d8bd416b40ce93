"""SHA-256 fingerprints for assets, inputs and metadata records."""

import hashlib
import json


def compute_hash(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def compute_string_hash(text: str) -> str:
    return compute_hash(text.encode("utf-8"))


def canonical_json(value) -> str:
    """Key-sorted, whitespace-free JSON. Equal inputs always serialize identically."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)


def compute_input_hash(value) -> str:
    return compute_string_hash(canonical_json(value))


def short_hash(full_hash: str) -> str:
    """First 8 characters, for display and log lines."""
    return full_hash[:8]
