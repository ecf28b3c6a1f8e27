import importlib
import pathlib
import sys

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))


def test_importable() -> None:
    module = importlib.import_module("sat_tracker")
    assert hasattr(module, "get_satellite_positions")


def test_propagate_importable_first() -> None:
    module = importlib.import_module("propagate")
    assert hasattr(module, "propagate_at")
