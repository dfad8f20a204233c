import asyncio

import pytest

from aquanet_core.domain.exceptions import ConfigurationError, UnsupportedOperationError
from aquanet_core.domain.llm import ProviderConfig
from aquanet_core.providers import DeepSeekProvider, OpenAIProvider
from aquanet_core.providers.registry import ProviderRegistry


class FakeProvider:
    name = "deepseek"
    instances = 0

    def __init__(self):
        type(self).instances += 1
        self.init_calls = 0
        self.config = None

    async def initialize(self, config):
        # 让出事件循环，模拟初始化过程中的挂起点
        await asyncio.sleep(0)
        self.init_calls += 1
        self.config = config


@pytest.fixture(autouse=True)
def reset_counter():
    FakeProvider.instances = 0


def _cfg(model="deepseek-chat", provider="deepseek"):
    return ProviderConfig(provider=provider, api_key="sk", model=model)


@pytest.mark.asyncio
async def test_same_key_returns_cached_instance():
    registry = ProviderRegistry(factories={"deepseek": FakeProvider})
    first = await registry.get_or_create(_cfg())
    second = await registry.get_or_create({"provider": "deepseek", "apiKey": "sk", "model": "deepseek-chat"})
    assert first is second
    assert first.init_calls == 1
    assert FakeProvider.instances == 1
    assert ("deepseek", "deepseek-chat") in registry


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "override, field",
    [
        ({"api_key": "other"}, "api_key"),
        ({"base_url": "https://b.example/v1"}, "base_url"),
        ({"timeout": 5}, "timeout"),
    ],
)
async def test_cached_key_rejects_different_connection_settings(override, field):
    registry = ProviderRegistry(factories={"deepseek": FakeProvider})
    first = await registry.get_or_create(_cfg())
    conflicting = ProviderConfig(**{"provider": "deepseek", "api_key": "sk", "model": "deepseek-chat", **override})
    with pytest.raises(ConfigurationError) as exc:
        await registry.get_or_create(conflicting)
    assert exc.value.code == "CONFLICTING_PROVIDER_CONFIG"
    assert exc.value.fields == (field,)
    assert await registry.get_or_create(_cfg()) is first
    assert FakeProvider.instances == 1


@pytest.mark.asyncio
async def test_concurrent_conflicting_request_is_rejected():
    registry = ProviderRegistry(factories={"deepseek": FakeProvider})
    results = await asyncio.gather(
        registry.get_or_create(_cfg()),
        registry.get_or_create(ProviderConfig(provider="deepseek", api_key="other", model="deepseek-chat")),
        return_exceptions=True,
    )
    assert results[0] is registry._providers[("deepseek", "deepseek-chat")]
    assert isinstance(results[1], ConfigurationError)
    assert FakeProvider.instances == 1


@pytest.mark.asyncio
async def test_remove_and_clear_release_locks():
    registry = ProviderRegistry(factories={"deepseek": FakeProvider})
    for _ in range(3):
        await registry.get_or_create(_cfg())
        assert registry.remove(_cfg()) is True
    assert registry._locks == {}

    await registry.get_or_create(_cfg("deepseek-chat"))
    await registry.get_or_create(_cfg("deepseek-coder"))
    registry.clear()
    assert registry._locks == {}
    assert len(registry) == 0
    await registry.get_or_create({"provider": "deepseek", "apiKey": "rotated", "model": "deepseek-chat"})


@pytest.mark.asyncio
async def test_remove_triggers_fresh_initialization():
    registry = ProviderRegistry(factories={"deepseek": FakeProvider})
    first = await registry.get_or_create(_cfg())
    assert registry.remove(_cfg()) is True
    assert registry.remove(_cfg()) is False
    third = await registry.get_or_create(_cfg())
    assert third is not first
    assert third.init_calls == 1
    assert FakeProvider.instances == 2


@pytest.mark.asyncio
async def test_concurrent_requests_initialize_once():
    registry = ProviderRegistry(factories={"deepseek": FakeProvider})
    results = await asyncio.gather(*(registry.get_or_create(_cfg()) for _ in range(5)))
    assert all(r is results[0] for r in results)
    assert FakeProvider.instances == 1
    assert results[0].init_calls == 1


@pytest.mark.asyncio
async def test_different_models_get_different_instances():
    registry = ProviderRegistry(factories={"deepseek": FakeProvider})
    chat, coder = await asyncio.gather(
        registry.get_or_create(_cfg("deepseek-chat")),
        registry.get_or_create(_cfg("deepseek-coder")),
    )
    assert chat is not coder
    assert len(registry) == 2
    registry.clear()
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_unsupported_provider():
    registry = ProviderRegistry()
    with pytest.raises(UnsupportedOperationError) as exc:
        await registry.get_or_create(_cfg(provider="gemini"))
    assert exc.value.code == "UNSUPPORTED_PROVIDER"
    assert len(registry) == 0
    assert not registry.is_supported("anthropic")
    assert registry.is_supported("deepseek")


@pytest.mark.asyncio
async def test_default_factories_build_real_providers():
    registry = ProviderRegistry()
    deepseek = await registry.get_or_create(_cfg())
    openai = await registry.get_or_create(_cfg("gpt-4o-mini", provider="openai"))
    assert isinstance(deepseek, DeepSeekProvider) and deepseek.initialized
    assert isinstance(openai, OpenAIProvider) and openai.initialized


@pytest.mark.asyncio
async def test_failed_initialization_is_not_cached():
    registry = ProviderRegistry()
    with pytest.raises(ConfigurationError):
        await registry.get_or_create(ProviderConfig(provider="deepseek", api_key="", model="deepseek-chat"))
    assert len(registry) == 0


def test_separate_registries_do_not_share_state():
    assert ProviderRegistry()._providers is not ProviderRegistry()._providers
