from __future__ import annotations

import re
from typing import List

_DROP = re.compile(r"[.,]")
_SPACES = re.compile(r"\s+")


def normalize_name(value: str) -> str:
    """Lower-case, drop periods/commas, hyphens to spaces, collapse whitespace.

    "Ogao-Ogao, M." -> "ogao ogao m"
    """
    if not value:
        return ""
    text = _DROP.sub("", value.lower()).replace("-", " ")
    return _SPACES.sub(" ", text).strip()


def name_tokens(value: str) -> List[str]:
    text = normalize_name(value)
    return text.split(" ") if text else []
