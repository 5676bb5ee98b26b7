"""Tests for the SQL option store and the settings registry."""
import asyncio

from theme.models.base import async_session_factory
from theme.services.option_store import SettingsRegistry, SqlOptionStore
from theme.services.theme_options import ThemeOptions


async def test_sql_store_get_missing():
    store = SqlOptionStore(async_session_factory)
    assert await store.get("missing") is None


async def test_sql_store_set_and_replace():
    store = SqlOptionStore(async_session_factory)
    await store.set("theme", {"custom_css": "a", "support": "off"})
    assert await store.get("theme") == {"custom_css": "a", "support": "off"}

    await store.set("theme", {"custom_css": "b", "support": "on"})
    assert await store.get("theme") == {"custom_css": "b", "support": "on"}


async def test_registry_groups(registry):
    registry.register_setting("group", "first", lambda value: value)
    registry.register_setting("group", "second", lambda value: value)
    registry.register_setting("group", "first", lambda value: value)
    assert registry.options_in_group("group") == ["first", "second"]
    assert registry.options_in_group("other") == []


async def test_update_option_runs_sanitizer(registry, store):
    registry.register_setting("group", "title", lambda value: value.strip())
    assert await registry.update_option("title", "  Hello  ") == "Hello"
    assert store.data["title"] == "Hello"


async def test_update_option_without_sanitizer_stores_value(registry, store):
    await registry.update_option("plain", {"a": 1})
    assert store.data["plain"] == {"a": 1}


async def test_add_option_only_when_absent(registry, store):
    registry.register_setting("group", "title", lambda value: value.lower())
    assert await registry.add_option("title", "First") is True
    assert await registry.add_option("title", "Second") is False
    assert store.data["title"] == "first"


async def test_registry_over_sql_store():
    registry = SettingsRegistry(SqlOptionStore(async_session_factory))
    registry.register_setting("group", "count", lambda value: {"count": int(value)})
    await registry.update_option("count", "3")
    assert await registry.store.get("count") == {"count": 3}


async def test_concurrent_first_writes_last_writer_wins():
    store = SqlOptionStore(async_session_factory)
    values = [{"custom_css": f"h{i} {{}}", "support": "off"} for i in range(5)]
    results = await asyncio.gather(*[store.set("theme", value) for value in values], return_exceptions=True)
    assert results == [None] * 5
    assert await store.get("theme") in values


async def test_concurrent_initialize_without_errors():
    store = SqlOptionStore(async_session_factory)
    registry = SettingsRegistry(store)
    theme_options = ThemeOptions(store)
    results = await asyncio.gather(
        *[theme_options.initialize(registry) for _ in range(5)], return_exceptions=True
    )
    assert results == [None] * 5
    assert await store.get(theme_options.option_name) == theme_options.get_default_options()
