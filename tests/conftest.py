import importlib.util
import time
import pytest

test_durations = []

MARKERS = {
    "gurobipy": "requires the Gurobi solver (gurobipy)",
    "mip": "uses the Python MIP library",
    "ortools": "uses OR-Tools",
    "slow": "slow tests",
}


def pytest_configure(config):
    for marker, description in MARKERS.items():
        config.addinivalue_line("markers", f"{marker}: {description}")


def pytest_collection_modifyitems(config, items):
    if importlib.util.find_spec("gurobipy") is not None:
        return
    skip_gurobi = pytest.mark.skip(reason="gurobipy is not installed")
    for item in items:
        if "gurobipy" in item.keywords:
            item.add_marker(skip_gurobi)


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_call(item):
    start = time.perf_counter()
    yield
    duration = time.perf_counter() - start
    test_durations.append((item.nodeid, duration))


def pytest_sessionfinish(session, exitstatus):
    print("\nTest durations:")
    total_time = sum(d for _, d in test_durations)
    if test_durations:
        avg = total_time / len(test_durations)
        print(f"\nAverage test duration: {avg:.4f} seconds")
