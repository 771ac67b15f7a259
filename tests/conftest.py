import datetime
from pathlib import Path

import pytest

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture
def created():
    return datetime.datetime(2024, 3, 9, 21, 15, 42, tzinfo=datetime.timezone.utc)


@pytest.fixture
def sample_curves_path():
    """GIMP 2.10 export: value, red, green (untouched), blue and alpha curves."""
    return DATA_DIR / "gimp_curves.txt"


@pytest.fixture
def sample_curves_text(sample_curves_path):
    return sample_curves_path.read_text(encoding="utf-8")
