"""Tests for resolving the pool implementation from configuration."""

import pytest

from ammsim.config import PoolSettings
from ammsim.exceptions import ConfigurationInconsistency
from ammsim.pool.factory import create_pool, load_pool_factory

from fakes import FakePool


class TestLoadPoolFactory:
    @pytest.mark.parametrize("path", ["", "fakes", "fakes:", ":create_pool"])
    def test_malformed_path(self, path: str) -> None:
        with pytest.raises(ConfigurationInconsistency, match="package.module:callable"):
            load_pool_factory(path)

    def test_missing_module(self) -> None:
        with pytest.raises(ConfigurationInconsistency, match="Cannot import"):
            load_pool_factory("no_such_module_xyz:create_pool")

    def test_missing_attribute(self) -> None:
        with pytest.raises(ConfigurationInconsistency, match="not a callable"):
            load_pool_factory("fakes:does_not_exist")

    def test_resolves_callable(self) -> None:
        factory = load_pool_factory("fakes:create_pool")
        assert callable(factory)


class TestCreatePool:
    def test_builds_pool_from_settings(self) -> None:
        pool = create_pool(PoolSettings(factory="fakes:create_pool", initial_tick=1000))
        assert isinstance(pool, FakePool)
        assert pool.cur_tick == 1000

    def test_rejects_non_pool(self) -> None:
        with pytest.raises(ConfigurationInconsistency, match="not a Pool"):
            create_pool(PoolSettings(factory="fakes:not_a_pool"))
