"""Unit tests for the configuration context."""

import pytest

from src.catalog.runtime.config.config_data import ConfigData
from src.catalog.runtime.context import (
    AppContext,
    get_config,
    get_context,
    merge_configs,
    with_context,
)


class TestContextManager:
    """Test the context manager functionality."""

    def test_default_context_available(self):
        """Should have a default context available."""
        context = get_context()

        assert isinstance(context, AppContext)
        assert isinstance(get_config(), ConfigData)
        assert context.config is get_config()

    def test_with_context_override(self):
        """Should override config for the duration of the context manager."""
        original = get_config()
        override = ConfigData()
        override.executor.timeout_seconds = 0.1

        with with_context(override):
            assert get_config().executor.timeout_seconds == 0.1
            # Fields not set on the override are inherited
            assert get_config().catalog.page_size == original.catalog.page_size

        assert get_config() is original

    def test_nested_overrides(self):
        """Should handle nested context overrides correctly."""
        level1 = ConfigData()
        level1.catalog.page_size = 5
        level2 = ConfigData()
        level2.catalog.default_order_by = -3

        with with_context(level1):
            with with_context(level2):
                assert get_config().catalog.page_size == 5
                assert get_config().catalog.default_order_by == -3
            assert get_config().catalog.page_size == 5

    def test_none_override_is_a_no_op(self):
        original = get_config()

        with with_context(None):
            assert get_config() is original

    def test_rejects_other_types(self):
        with pytest.raises(ValueError, match="must be ConfigData"):
            with with_context({"catalog": {"page_size": 5}}):
                pass

    def test_restored_after_exception(self):
        original = get_config()
        override = ConfigData()
        override.cache.synchronous_ttl_seconds = 60

        with pytest.raises(RuntimeError):
            with with_context(override):
                raise RuntimeError("boom")

        assert get_config() is original

    async def test_override_reaches_executor_workers(self, executor):
        """Should apply an override to store calls run on the guarded executor."""
        override = ConfigData()
        override.catalog.page_size = 3

        with with_context(override):
            page_size = await executor.run(lambda: get_config().catalog.page_size)

        assert page_size == 3
        assert get_config().catalog.page_size != 3

    def test_merge_configs_keeps_base_values(self):
        base = ConfigData()
        base.catalog.page_size = 20
        override = ConfigData()
        override.executor.max_workers = 2

        merged = merge_configs(base, override)

        assert merged.catalog.page_size == 20
        assert merged.executor.max_workers == 2
