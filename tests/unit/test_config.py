"""
Unit tests for AdminConfig loading.
"""

import pytest

from overseer.config import AdminConfig


@pytest.mark.unit
def test_defaults():
    config = AdminConfig()
    assert config.account_page_size == 10
    assert config.catalog_page_size == 50
    assert config.spawn_max_count == 100
    assert config.spawn_max_radius == 20
    assert config.placement_attempts == 20


@pytest.mark.unit
def test_from_env(monkeypatch):
    monkeypatch.setenv("OVERSEER_MAX_LEVEL", "60")
    monkeypatch.setenv("OVERSEER_MAX_MAGIC_LEVEL", "5")
    monkeypatch.setenv("OVERSEER_LOG_LEVEL", "WARNING")
    config = AdminConfig.from_env()
    assert config.max_level == 60
    assert config.max_magic_level == 5
    assert config.log_level == "WARNING"


@pytest.mark.unit
def test_from_yaml(tmp_path):
    path = tmp_path / "overseer.yaml"
    path.write_text("max_level: 13\ncatalog_page_size: 25\n")
    config = AdminConfig.from_yaml(path)
    assert config.max_level == 13
    assert config.catalog_page_size == 25


@pytest.mark.unit
def test_from_yaml_rejects_unknown_keys(tmp_path):
    path = tmp_path / "overseer.yaml"
    path.write_text("max_levle: 13\n")
    with pytest.raises(ValueError, match="Unknown config keys: max_levle"):
        AdminConfig.from_yaml(path)


@pytest.mark.unit
def test_from_yaml_rejects_non_mapping(tmp_path):
    path = tmp_path / "overseer.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ValueError, match="expected a mapping"):
        AdminConfig.from_yaml(path)


@pytest.mark.unit
@pytest.mark.parametrize(
    "kwargs",
    [{"max_level": 0}, {"max_magic_level": -1}, {"catalog_page_size": 0}, {"spawn_max_radius": 0}],
)
def test_invalid_values_rejected(kwargs):
    with pytest.raises(ValueError):
        AdminConfig(**kwargs)
