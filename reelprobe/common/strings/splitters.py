# reelprobe/common/strings/splitters.py
from typing import List


def csv_to_list(v: str | List[str] | None) -> List[str]:
    """Accept 'a, b,c' (env style) or a list; return trimmed, non-empty entries."""
    if v is None:
        return []
    if isinstance(v, (list, tuple)):
        return [str(s).strip() for s in v if s and str(s).strip()]
    return [s.strip() for s in str(v).split(",") if s.strip()]
