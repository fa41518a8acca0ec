import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'appserver' and tests/ as 'helpers'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from appserver.core.deploy import DeploymentController, FlagFileExtractor
from appserver.core.logging import reset_logging_for_tests
from appserver.core.node import AppserverNode, NodeMapper
from appserver.core.registry import AppRegistry
from appserver.core.store import ConfigurationStore, configuration_from_document
from helpers.builders import sample_document


@pytest.fixture(autouse=True)
def _isolate_appserver_env(monkeypatch: pytest.MonkeyPatch):
    """Drop APPSERVER_* variables leaking in from the invoking shell."""
    for key in list(os.environ):
        if key.startswith("APPSERVER_"):
            monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    reset_logging_for_tests()


@pytest.fixture
def mapper() -> NodeMapper:
    return NodeMapper()


@pytest.fixture
def configuration(mapper: NodeMapper) -> AppserverNode:
    return configuration_from_document(sample_document(), mapper)


@pytest.fixture
def store(configuration: AppserverNode) -> ConfigurationStore:
    return ConfigurationStore(configuration)


@pytest.fixture
def registry(store: ConfigurationStore, mapper: NodeMapper) -> AppRegistry:
    return AppRegistry(store, mapper=mapper)


@pytest.fixture
def deploy_dir(tmp_path: Path) -> Path:
    path = tmp_path / "deploy"
    path.mkdir()
    return path


@pytest.fixture
def extractor(deploy_dir: Path) -> FlagFileExtractor:
    return FlagFileExtractor(deploy_dir)


@pytest.fixture
def controller(registry: AppRegistry, extractor: FlagFileExtractor) -> DeploymentController:
    return DeploymentController(registry, extractor)
