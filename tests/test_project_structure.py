"""Basic project scaffolding tests."""

import importlib


def test_package_importable() -> None:
    """Verify the top-level package is importable."""
    import armada  # noqa: F401  (import used to ensure availability)

    assert armada.__version__


def test_submodules_exist() -> None:
    modules = [
        "armada.engine",
        "armada.engine.game",
        "armada.ai",
        "armada.telemetry",
        "armada.config",
        "armada.commentary",
    ]

    for module in modules:
        assert importlib.import_module(module) is not None


def test_engine_exports_public_operations() -> None:
    engine = importlib.import_module("armada.engine")
    for name in (
        "create_empty_grid",
        "can_place_ship",
        "generate_fleet",
        "is_sunk",
        "resolve_shot",
        "apply_shield",
        "apply_area_scan",
        "apply_area_strike",
    ):
        assert callable(getattr(engine, name))
