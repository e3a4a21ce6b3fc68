"""
Tests for settings, game data and YAML configuration overrides.
"""

import logging

import pytest
from datetime import datetime

from arena_parser.config import wow_data
from arena_parser.config.loader import ConfigLoader, load_and_apply_config
from arena_parser.config.settings import DEFAULT_MAX_BUFFERED_LINES, ParserSettings, reload_settings
from arena_parser.config.wow_data import (
    ArenaBracket,
    get_arena_name,
    get_class_id_from_spec,
    is_arena_zone,
    parse_bracket,
)
from arena_parser.models.match import MatchMetadata, PlayerMetadata


@pytest.fixture
def restore_wow_data():
    """Undo runtime overrides of the game data tables."""
    zones = dict(wow_data.ARENA_ZONE_NAMES)
    specs = dict(wow_data.SPEC_TO_CLASS)
    yield
    wow_data.ARENA_ZONE_NAMES.clear()
    wow_data.ARENA_ZONE_NAMES.update(zones)
    wow_data.SPEC_TO_CLASS.clear()
    wow_data.SPEC_TO_CLASS.update(specs)


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self, monkeypatch):
        """Test defaults with a clean environment."""
        for name in ("ARENA_PARSER_MAX_BUFFERED_LINES", "LOG_LEVEL", "ARENA_PARSER_CONFIG"):
            monkeypatch.delenv(name, raising=False)

        settings = ParserSettings.from_env()
        assert settings.max_buffered_lines == DEFAULT_MAX_BUFFERED_LINES
        assert settings.log_level == "info"
        assert settings.config_path is None
        settings.validate()

    def test_from_env(self, monkeypatch):
        """Test reading overrides from the environment."""
        monkeypatch.setenv("ARENA_PARSER_MAX_BUFFERED_LINES", "500")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("ARENA_PARSER_CONFIG", "/tmp/arena.yaml")

        settings = reload_settings()
        assert settings.max_buffered_lines == 500
        assert settings.log_level == "debug"
        assert settings.config_path == "/tmp/arena.yaml"

        monkeypatch.delenv("ARENA_PARSER_MAX_BUFFERED_LINES")
        monkeypatch.delenv("LOG_LEVEL")
        monkeypatch.delenv("ARENA_PARSER_CONFIG")
        reload_settings()

    def test_validate(self):
        """Test that invalid settings are reported."""
        with pytest.raises(ValueError, match="line buffer size"):
            ParserSettings(max_buffered_lines=0).validate()
        with pytest.raises(ValueError, match="log level"):
            ParserSettings(log_level="loud").validate()

    def test_malformed_buffer_size_uses_default(self, monkeypatch):
        """Test that a non-integer buffer size does not break loading settings."""
        monkeypatch.setenv("ARENA_PARSER_MAX_BUFFERED_LINES", "lots")

        settings = ParserSettings.from_env()
        assert settings.max_buffered_lines == DEFAULT_MAX_BUFFERED_LINES

    def test_setup_logging(self, monkeypatch):
        """Test that the configured level is handed to basicConfig."""
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

        ParserSettings(log_level="debug").setup_logging()
        ParserSettings(log_level="bogus").setup_logging()

        assert calls[0]["level"] == logging.DEBUG
        assert calls[1]["level"] == logging.INFO
        assert "%(name)s" in calls[0]["format"]


class TestWowData:
    """Test static game data lookups."""

    def test_brackets(self):
        """Test arena type strings from ARENA_MATCH_START."""
        assert parse_bracket("2v2") is ArenaBracket.TWO_V_TWO
        assert parse_bracket("3v3") is ArenaBracket.THREE_V_THREE
        assert parse_bracket("Rated Solo Shuffle") is ArenaBracket.SOLO_SHUFFLE
        assert parse_bracket("Skirmish") is None
        assert parse_bracket(None) is None
        assert ArenaBracket.SOLO_SHUFFLE.is_solo_shuffle
        assert ArenaBracket.SOLO_SHUFFLE.value == "Solo Shuffle"

    def test_spec_to_class(self):
        """Test specialization lookups."""
        assert get_class_id_from_spec(62) == wow_data.WowClass.MAGE
        assert get_class_id_from_spec(1473) == wow_data.WowClass.EVOKER
        assert get_class_id_from_spec(0) == 0

    def test_arena_names(self):
        """Test arena zone lookups."""
        assert is_arena_zone(2547)
        assert get_arena_name(572) == "Ruins of Lordaeron"
        assert not is_arena_zone(1)
        assert get_arena_name(1) == "Unknown Arena (1)"


class TestConfigLoader:
    """Test YAML overrides."""

    def test_load_and_apply(self, tmp_path, restore_wow_data):
        """Test that zones and specs from YAML are applied."""
        config_file = tmp_path / "arena_config.yaml"
        config_file.write_text(
            "arena_zones:\n"
            "  9999: Test Arena\n"
            "specializations:\n"
            "  99999: 8\n"
        )

        load_and_apply_config(str(config_file))

        assert get_arena_name(9999) == "Test Arena"
        assert get_class_id_from_spec(99999) == 8

    def test_invalid_entries_skipped(self, restore_wow_data):
        """Test that bad entries are logged and skipped."""
        ConfigLoader.apply_config({"arena_zones": {"abc": "Bad"}, "specializations": {1: "x", 2: 3}})

        assert "abc" not in wow_data.ARENA_ZONE_NAMES
        assert 1 not in wow_data.SPEC_TO_CLASS
        assert wow_data.SPEC_TO_CLASS[2] == 3

    def test_non_mapping_ignored(self, tmp_path, monkeypatch):
        """Test that a YAML list is not accepted as configuration."""
        monkeypatch.chdir(tmp_path)
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- 1\n- 2\n")

        assert ConfigLoader.load_config(str(config_file)) == {}

    def test_broken_yaml_ignored(self, tmp_path, monkeypatch):
        """Test that unparsable YAML falls back to defaults."""
        monkeypatch.chdir(tmp_path)
        config_file = tmp_path / "broken.yaml"
        config_file.write_text("arena_zones: [unclosed\n")

        assert ConfigLoader.load_config(str(config_file)) == {}


class TestMatchHash:
    """Test the cross-log match identifier."""

    def _metadata(self, player_ids):
        return MatchMetadata(
            timestamp=datetime(2025, 9, 15, 21, 30, 22),
            zone_id=2547,
            bracket="3v3",
            season=33,
            is_ranked=True,
            players=[PlayerMetadata(id=pid, team_id=0, spec_id=62, class_id=8) for pid in player_ids],
        )

    def test_order_independent(self):
        """Test that player order does not change the hash."""
        first = self._metadata(["Player-1-A", "Player-1-B"])
        second = self._metadata(["Player-1-B", "Player-1-A"])

        assert first.match_hash() == second.match_hash()
        assert len(first.match_hash()) == 64

    def test_players_change_hash(self):
        """Test that different participants give different hashes."""
        assert self._metadata(["Player-1-A"]).match_hash() != self._metadata(["Player-1-B"]).match_hash()

    def test_to_dict(self):
        """Test the camelCase export."""
        metadata = self._metadata(["Player-1-A"])
        metadata.winning_team_id = 1
        data = metadata.to_dict()

        assert data["mapId"] == 2547
        assert data["winningTeamId"] == 1
        assert data["players"][0]["classId"] == 8
        assert "matchDuration" not in data
        assert "shuffleRounds" not in data
