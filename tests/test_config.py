import pytest

from edit_history.config import load_settings, parse_settings, save_settings
from edit_history.models import NO_LIMIT


class TestParseSettings:
    def test_defaults(self):
        s = parse_settings({})
        assert s.limits.min_interval_ms == 60_000
        assert s.limits.max_entries == NO_LIMIT
        assert s.limits.max_age_ms == NO_LIMIT
        assert s.limits.max_bytes == NO_LIMIT
        assert s.policy.extension_allowlist == [".md", ".txt", ".csv", ".htm", ".html"]
        assert s.policy.path_substring_denylist == []
        assert s.show_on_status_bar
        assert s.diff_layout == "inline"
        assert s.debug_level == "warn"

    def test_zero_interval_is_manual_only(self):
        s = parse_settings({"EDIT_HISTORY_MIN_SECONDS_BETWEEN_EDITS": "0"})
        assert s.limits.manual_only

    def test_units(self):
        s = parse_settings({
            "EDIT_HISTORY_MAX_EDITS": "10",
            "EDIT_HISTORY_MAX_EDIT_AGE": "3600",
            "EDIT_HISTORY_MAX_FILE_SIZE_KB": "2",
        })
        assert s.limits.max_entries == 10
        assert s.limits.max_age_ms == 3_600_000
        assert s.limits.max_bytes == 2048

    @pytest.mark.parametrize("value", ["", "abc", "-5", "0"])
    def test_unbounded_values(self, value):
        assert parse_settings({"EDIT_HISTORY_MAX_EDITS": value}).limits.max_entries == NO_LIMIT

    def test_bad_choices_fall_back(self):
        s = parse_settings({"EDIT_HISTORY_DIFF_LAYOUT": "sideways", "EDIT_HISTORY_DEBUG_LEVEL": "loud"})
        assert s.diff_layout == "inline"
        assert s.debug_level == "warn"

    def test_booleans(self):
        assert not parse_settings({"EDIT_HISTORY_SHOW_ON_STATUS_BAR": "false"}).show_on_status_bar
        assert parse_settings({"EDIT_HISTORY_SHOW_ON_STATUS_BAR": "Yes"}).show_on_status_bar

    def test_unknown_keys_ignored(self):
        assert "OTHER" not in parse_settings({"OTHER": "1"}).raw


class TestEnvFile:
    def test_load_from_file(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("EDIT_HISTORY_MAX_EDITS=7\nEDIT_HISTORY_DIFF_LAYOUT=top_bottom\n", encoding="utf-8")
        s = load_settings(str(env))
        assert s.limits.max_entries == 7
        assert s.diff_layout == "top_bottom"

    def test_missing_file_uses_defaults(self, tmp_path):
        assert load_settings(str(tmp_path / "missing.env")).limits.min_interval_ms == 60_000

    def test_environment_wins(self, tmp_path, monkeypatch):
        env = tmp_path / ".env"
        env.write_text("EDIT_HISTORY_MAX_EDITS=7\n", encoding="utf-8")
        monkeypatch.setenv("EDIT_HISTORY_MAX_EDITS", "3")
        assert load_settings(str(env)).limits.max_entries == 3

    def test_save_keeps_other_lines(self, tmp_path):
        env = tmp_path / ".env"
        env.write_text("# my settings\nOPENAI_API_KEY=abc\nEDIT_HISTORY_MAX_EDITS=7\n", encoding="utf-8")
        s = save_settings({"EDIT_HISTORY_MAX_EDITS": "9", "EDIT_HISTORY_ROOT_FOLDER": "hist"}, str(env))
        text = env.read_text(encoding="utf-8")
        assert "# my settings" in text
        assert "OPENAI_API_KEY=abc" in text
        assert "EDIT_HISTORY_MAX_EDITS=9" in text
        assert "EDIT_HISTORY_MAX_EDITS=7" not in text
        assert s.limits.max_entries == 9
        assert s.root_folder == "hist"

    def test_save_rejects_unknown_key(self, tmp_path):
        with pytest.raises(KeyError):
            save_settings({"EDIT_HISTORY_NOPE": "1"}, str(tmp_path / ".env"))
