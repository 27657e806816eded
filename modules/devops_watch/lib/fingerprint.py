from __future__ import annotations

import hashlib
from collections.abc import Iterable

from .models import Candidate


def make_hash(parts: Iterable[str]) -> str:
    """
    SHA-1 over the ordered concatenation of `parts` (UTF-8), as 40 lowercase hex chars.
    """
    h = hashlib.sha1()
    for p in parts:
        h.update(p.encode("utf-8"))
    return h.hexdigest()


def fingerprint(candidate: Candidate) -> str:
    """Dedupe key for a candidate: company + title + link. Location is excluded."""
    return make_hash((candidate.company, candidate.title, candidate.link))
