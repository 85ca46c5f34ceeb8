"""JSON export of the full customer tree."""
import json
from datetime import date
from typing import Iterable, Optional

from adalloc.models import Customer


def export_customers(customers: Iterable[Customer]) -> str:
    """Pretty-printed JSON document of every customer with nested campaigns and channels."""
    return json.dumps([c.to_dict() for c in customers], indent=2, ensure_ascii=False)


def export_filename(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"adalloc-data-{today.isoformat()}.json"
