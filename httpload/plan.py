# httpload/plan.py
from typing import List, NamedTuple, Sequence, Tuple


class RequestDescriptor(NamedTuple):
    url: str
    data_parts: Tuple[str, ...] = ()


def substitute(template: str, parts: Sequence[str]) -> str:
    """Replace every literal {data<i>} (1-based) with parts[i-1]."""
    for i, part in enumerate(parts, start=1):
        template = template.replace("{data%d}" % i, part)
    return template


def build_plan(url: str, data: Sequence[str], repeats: int) -> List[RequestDescriptor]:
    """
    Expand the url template and data rows into the ordered list of requests
    for a run: repeat-major, then rows in order. Without data the plain url
    is repeated `repeats` times.
    """
    if not data:
        return [RequestDescriptor(url) for _ in range(max(repeats, 0))]

    plan = []
    for _ in range(repeats):
        for row in data:
            parts = tuple(row.split())
            plan.append(RequestDescriptor(substitute(url, parts), parts))
    return plan
