import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'modctl' and tests/ importable as 'helpers'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from helpers.cache_utils import reset_modctl_caches
from helpers.project import make_project, write_auth_billing


@pytest.fixture(autouse=True)
def _reset_modctl_state(monkeypatch):
    """Fresh caches for every test, and no MODCTL_* overrides from the developer shell."""
    for key in list(os.environ):
        if key.startswith("MODCTL_"):
            monkeypatch.delenv(key, raising=False)
    reset_modctl_caches()
    yield
    reset_modctl_caches()


@pytest.fixture
def isolated_project_env(tmp_path, monkeypatch) -> Path:
    """
    Isolated modctl project for tests.

    The project root is exported via MODCTL_PROJECT_ROOT and is also the CWD,
    so both explicit and auto-detected root resolution land inside tmp_path.
    """
    root = make_project(tmp_path / "project")
    monkeypatch.setenv("MODCTL_PROJECT_ROOT", str(root))
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def auth_billing_project(isolated_project_env: Path) -> Path:
    write_auth_billing(isolated_project_env)
    return isolated_project_env


@pytest.fixture
def service(auth_billing_project: Path):
    from modctl.core.modules import ModuleService

    return ModuleService.from_config(repo_root=auth_billing_project)
