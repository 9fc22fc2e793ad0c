from collections.abc import Callable, Iterator

import httpx
import pytest

from dts_critic.clients.npm_registry import NpmRegistryClient
from dts_critic.models.config import CriticConfig
from dts_critic.models.runtime_module import RuntimeModule
from tests.consts import REGISTRY_URL, UNPKG_URL
from tests.utils import FakeInspector, registry_handler


@pytest.fixture
def config() -> CriticConfig:
    return CriticConfig(registry_url=REGISTRY_URL, unpkg_url=UNPKG_URL)


@pytest.fixture
def registry_client(config: CriticConfig) -> Iterator[NpmRegistryClient]:
    client = NpmRegistryClient(
        config, client=httpx.Client(transport=httpx.MockTransport(registry_handler))
    )
    yield client
    client.close()


@pytest.fixture
def make_inspector() -> Callable[..., FakeInspector]:
    def factory(**fields: object) -> FakeInspector:
        return FakeInspector(module=RuntimeModule.model_validate(fields), inspected=[])

    return factory
