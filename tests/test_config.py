"""
Tests for settings and generation limits.
"""

import pytest

from py_citygen.config import GenerationSettings, Settings
from py_citygen.core.neighborhoods import BuildingType, NeighborhoodOptions


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("CITYGEN_API_PORT", raising=False)
        settings = Settings()

        assert settings.api_port == 8000
        assert settings.default_district_rows == 10
        assert settings.default_neighborhood_rows == 10
        assert settings.default_seed is None

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("CITYGEN_API_PORT", "9001")
        monkeypatch.setenv("CITYGEN_DEFAULT_SEED", "fixed")

        settings = Settings()

        assert settings.api_port == 9001
        assert settings.default_seed == "fixed"

    def test_neighborhood_minimum(self, monkeypatch):
        monkeypatch.setenv("CITYGEN_DEFAULT_NEIGHBORHOOD_ROWS", "2")

        with pytest.raises(ValueError):
            Settings()


class TestGenerationSettings:
    """Test limit models."""

    def test_limits(self):
        limits = GenerationSettings()

        assert limits.neighborhoods.min_rows == 3
        assert limits.neighborhoods.min_cols == 3
        assert limits.districts.max_name_length == 50
        assert limits.max_total_buildings == 2_000_000

    def test_neighborhood_option_defaults(self):
        options = NeighborhoodOptions()

        assert options.road_color == (55, 55, 55)
        assert len(options.type_buckets) == 10
        assert options.type_buckets.count(BuildingType.RESIDENCE) == 5
        assert options.type_buckets.count(BuildingType.SHOP) == 3
