"""Regression tests for application route registration."""
from studypal.main import app


def test_stats_overview_route_registered_once() -> None:
    """Ensure the overview endpoint is published exactly once with a single GET."""
    paths = app.openapi()["paths"]

    overview_paths = [path for path in paths if path == "/stats/overview"]
    assert len(overview_paths) == 1
    assert list(paths["/stats/overview"]) == ["get"]
    assert "/health" in paths
