"""Tests for the host area registry and its YAML loader."""
import pytest

from entrel.core.exceptions import InvalidArgumentError, ValidationError
from entrel.database.configs import (
    HostAreaConfig,
    HostAreaRegistry,
    default_registry,
    load_host_area_configs,
)


class TestDefaultRegistry:

    def test_contains_booking_areas(self):
        registry = default_registry()
        assert ("mod_booking", "option") in registry
        assert ("mod_booking", "optiondate") in registry
        assert len(registry) == 2

    def test_option_area_names_its_dates(self):
        config = default_registry().get("mod_booking", "option")
        assert config.table == "booking_options"
        assert config.parent_column == "bookingid"
        assert config.sub_area == "optiondate"

    def test_optiondate_has_no_sub_area(self):
        config = default_registry().get("mod_booking", "optiondate")
        assert config.parent_column == "optionid"
        assert config.sub_area is None

    def test_unknown_pair_rejected(self):
        with pytest.raises(InvalidArgumentError):
            default_registry().get("mod_quiz", "attempt")


class TestHostAreaRegistry:

    def test_register_replaces_existing(self):
        registry = HostAreaRegistry()
        registry.register(HostAreaConfig("c", "a", "t1", "p"))
        registry.register(HostAreaConfig("c", "a", "t2", "p"))

        assert len(registry) == 1
        assert registry.get("c", "a").table == "t2"

    def test_iterates_sorted_by_key(self):
        registry = HostAreaRegistry(
            [HostAreaConfig("z", "a", "t", "p"), HostAreaConfig("a", "b", "t", "p")]
        )
        assert [c.key for c in registry] == [("a", "b"), ("z", "a")]


class TestLoadHostAreaConfigs:

    def test_extends_default_registry(self, tmp_path):
        path = tmp_path / "areas.yaml"
        path.write_text(
            "areas:\n"
            "  - component: mod_event\n"
            "    area: session\n"
            "    table: event_sessions\n"
            "    parent_column: eventid\n",
            encoding="utf-8",
        )

        registry = load_host_area_configs(path)

        assert ("mod_event", "session") in registry
        assert ("mod_booking", "option") in registry
        assert registry.get("mod_event", "session").sub_area is None

    def test_extends_given_registry(self, tmp_path):
        path = tmp_path / "areas.yaml"
        path.write_text(
            "areas:\n"
            "  - {component: c, area: a, table: t, parent_column: p, sub_area: s}\n",
            encoding="utf-8",
        )

        registry = load_host_area_configs(path, HostAreaRegistry())

        assert len(registry) == 1
        assert registry.get("c", "a").sub_area == "s"

    def test_missing_areas_list(self, tmp_path):
        path = tmp_path / "areas.yaml"
        path.write_text("hosts: []\n", encoding="utf-8")

        with pytest.raises(ValidationError):
            load_host_area_configs(path)

    def test_missing_required_key(self, tmp_path):
        path = tmp_path / "areas.yaml"
        path.write_text(
            "areas:\n  - {component: c, area: a, table: t}\n", encoding="utf-8"
        )

        with pytest.raises(ValidationError) as exc_info:
            load_host_area_configs(path)
        assert "parent_column" in str(exc_info.value)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "areas.yaml"
        path.write_text("areas: [unclosed\n", encoding="utf-8")

        with pytest.raises(ValidationError):
            load_host_area_configs(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValidationError):
            load_host_area_configs(tmp_path / "nope.yaml")
