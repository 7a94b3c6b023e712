"""
Structure lint tests.

Verify that every component follows the package conventions and that the
runtime files the service needs are present.
"""

import ast
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
COMPONENTS_DIR = PROJECT_ROOT / "src" / "components"

COMPONENTS = sorted(
    p.name for p in COMPONENTS_DIR.iterdir() if p.is_dir() and not p.name.startswith("__")
)


class TestProjectStructure:
    def test_layers_exist(self) -> None:
        for layer in ("domain", "components", "adapters", "api", "rules", "app_shell"):
            assert (PROJECT_ROOT / "src" / layer).is_dir(), layer
        assert (PROJECT_ROOT / "src" / "core" / "ports").is_dir()

    def test_runtime_files_exist(self) -> None:
        assert (PROJECT_ROOT / "rules.yaml").is_file()
        assert (PROJECT_ROOT / "migrations" / "001_initial.sql").is_file()

    def test_expected_components(self) -> None:
        assert set(COMPONENTS) == {"notifications", "proposals", "review", "transform"}


@pytest.mark.parametrize("name", COMPONENTS)
class TestComponentConventions:
    def test_has_entry_module(self, name: str) -> None:
        assert (COMPONENTS_DIR / name / "__init__.py").is_file()
        assert (COMPONENTS_DIR / name / "component.py").is_file()

    def test_exports_all(self, name: str) -> None:
        tree = ast.parse((COMPONENTS_DIR / name / "__init__.py").read_text(encoding="utf-8"))
        exported = [
            node
            for node in tree.body
            if isinstance(node, ast.Assign)
            and any(isinstance(t, ast.Name) and t.id == "__all__" for t in node.targets)
        ]
        assert exported, f"{name}/__init__.py must define __all__"

    def test_does_not_import_api_layer(self, name: str) -> None:
        for path in (COMPONENTS_DIR / name).rglob("*.py"):
            if "tests" in path.parts:
                continue
            source = path.read_text(encoding="utf-8")
            assert "src.api" not in source, f"{path} imports the API layer"
