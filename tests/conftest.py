import pathlib
import sys

p = str(pathlib.Path(__file__).resolve().parents[1])
sys.path.insert(0, p) if p not in sys.path else None

from feecalc.config import get_settings  # noqa: E402
from feecalc.core.engine import get_engine  # noqa: E402


def pytest_runtest_setup(item):
    # Settings and the default engine are cached per process; tests change env.
    get_settings.cache_clear()
    get_engine.cache_clear()
