from __future__ import annotations

from pathlib import Path

import pytest


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: unit tests (fast, hermetic)")
    config.addinivalue_line("markers", "integration: integration tests (multi-component)")
    config.addinivalue_line("markers", "e2e: end-to-end tests (public API full flow)")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    category_markers = {"unit", "integration", "e2e"}
    tests_root = Path(__file__).resolve().parent
    errors: list[str] = []

    for item in items:
        item_path = Path(str(item.fspath))
        try:
            rel = item_path.resolve().relative_to(tests_root)
        except ValueError:
            errors.append(f"{item_path}: test path is outside tests/")
            continue

        category = rel.parts[0] if rel.parts else None
        markers = {m.name for m in item.iter_markers() if m.name in category_markers}

        if category not in category_markers:
            errors.append(f"{item_path}: tests must live under tests/<category>/")
            continue
        if len(markers) != 1:
            errors.append(
                f"{item_path}: expected exactly one category marker "
                f"{sorted(category_markers)}; got {sorted(markers)}"
            )
            continue
        marker = next(iter(markers))
        if marker != category:
            errors.append(f"{item_path}: marker '{marker}' does not match directory '{category}'")

    if errors:
        raise pytest.UsageError("Test marker/category mismatch:\n" + "\n".join(errors))
