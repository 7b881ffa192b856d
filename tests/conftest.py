import sys
from datetime import datetime, timedelta
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from schema import TextElement

HCM = ZoneInfo("Asia/Ho_Chi_Minh")


@pytest.fixture
def days_ago():
    """Return a helper giving a datetime n days before now, in Vietnam time."""
    def _days_ago(n):
        return datetime.now(HCM) - timedelta(days=n)
    return _days_ago


def make_grid(rows, xs, start_y=100.0, step=20.0):
    """Lay out rows of cell text as TextElements on a regular grid."""
    elements = []
    for r, cells in enumerate(rows):
        for x, text in zip(xs, cells):
            if text:
                elements.append(TextElement(x=x, y=start_y + r * step, text=text, font_size=9))
    return elements
