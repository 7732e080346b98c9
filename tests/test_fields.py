"""
Tests for parsers/fields.py.

Covers:
- extract_title: marker stripping, trailing markers kept
- extract_time / extract_due_date / extract_priority / extract_completion_date:
  every syntax on its own, and precedence when several are present
- extract_tags: ordering, duplicates, token limits, markup stripping
- extract_body: tab / space indentation, stop conditions
"""

import sys
from pathlib import Path

# Add src to path so imports work without installation
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from taskboard_index.parsers.fields import (
    DUE_RULES,
    PRIORITY_EMOJIS,
    TIME_RULES,
    extract_body,
    extract_completion_date,
    extract_due_date,
    extract_priority,
    extract_tags,
    extract_time,
    extract_title,
    matching_rule,
)


# ---------------------------------------------------------------------------
# Title
# ---------------------------------------------------------------------------

class TestTitle:
    def test_strips_marker(self):
        assert extract_title("- [ ] Buy milk") == "Buy milk"

    def test_strips_completed_marker_and_whitespace(self):
        assert extract_title("- [x]   Spaced out   ") == "Spaced out"

    def test_other_bullets(self):
        assert extract_title("* [/] Star bullet") == "Star bullet"
        assert extract_title("+ [-] Plus bullet") == "Plus bullet"

    def test_trailing_markers_kept(self):
        line = "- [ ] Buy milk #errand 📅 2024-09-28 ⏫"
        assert extract_title(line) == "Buy milk #errand 📅 2024-09-28 ⏫"

    def test_empty_title(self):
        assert extract_title("- [ ]") == ""


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------

class TestTime:
    def test_dataview_field(self):
        assert extract_time("- [ ] Meeting [time:: 10:00 - 11:00]") == "10:00 - 11:00"

    def test_call_form(self):
        assert extract_time("- [ ] Meeting @time(09:00 - 10:00)") == "09:00 - 10:00"

    def test_clock_emoji(self):
        assert extract_time("- [ ] Meeting ⏰ 14:00 - 15:30") == "14:00 - 15:30"

    def test_range_at_line_start(self):
        assert extract_time("- [ ] 08:00 - 09:00 Standup") == "08:00 - 09:00"

    def test_clock_emoji_bracketed(self):
        assert extract_time("- [ ] Standup ⏰ [08:00 - 09:00]") == "08:00 - 09:00"

    def test_dataview_wins_over_line_start(self):
        line = "- [ ] 08:00 - 09:00 Standup [time:: 10:00 - 11:00]"
        assert extract_time(line) == "10:00 - 11:00"

    def test_call_wins_over_emoji(self):
        line = "- [ ] Sync ⏰ 14:00 - 15:00 @time(16:00 - 17:00)"
        assert extract_time(line) == "16:00 - 17:00"

    def test_captured_verbatim(self):
        assert extract_time("- [ ] Gym [time:: 18:00-19:00]") == "18:00-19:00"

    def test_range_mid_line_without_emoji_ignored(self):
        assert extract_time("- [ ] Call at 10:00 - 11:00") == ""

    def test_no_time(self):
        assert extract_time("- [ ] Nothing scheduled") == ""

    def test_deciding_rule_name(self):
        assert matching_rule(TIME_RULES, "- [ ] x ⏰ [08:00 - 09:00]") == "emoji-bracketed"
        assert matching_rule(TIME_RULES, "- [ ] 08:00 - 09:00 x") == "line-start"
        assert matching_rule(TIME_RULES, "- [ ] x") is None


# ---------------------------------------------------------------------------
# Due date
# ---------------------------------------------------------------------------

class TestDueDate:
    def test_emoji(self):
        assert extract_due_date("- [ ] Pay rent 📅 2024-10-01") == "2024-10-01"

    def test_emoji_day_first(self):
        assert extract_due_date("- [ ] Pay rent 📅 01-10-2024") == "01-10-2024"

    def test_dataview_field(self):
        assert extract_due_date("- [ ] Pay rent [due:: 2024-10-01]") == "2024-10-01"

    def test_call_form(self):
        assert extract_due_date("- [ ] Pay rent @due(2024-10-01)") == "2024-10-01"

    def test_emoji_wins(self):
        line = "- [ ] A 📅 2024-09-28 [due:: 2024-10-01] @due(2024-11-01)"
        assert extract_due_date(line) == "2024-09-28"

    def test_dataview_wins_over_call(self):
        line = "- [ ] A @due(2024-11-01) [due:: 2024-10-01]"
        assert extract_due_date(line) == "2024-10-01"
        assert matching_rule(DUE_RULES, line) == "dataview"

    def test_unsupported_shape(self):
        assert extract_due_date("- [ ] A 📅 2024/09/28") == ""

    def test_no_due(self):
        assert extract_due_date("- [ ] A") == ""


# ---------------------------------------------------------------------------
# Priority
# ---------------------------------------------------------------------------

class TestPriority:
    def test_dataview_field(self):
        assert extract_priority("- [ ] A [priority:: 2]") == 2

    def test_call_form(self):
        assert extract_priority("- [ ] A @priority( 4 )") == 4

    def test_default_emoji_table(self):
        assert extract_priority("- [ ] A 🔽") == 4
        assert extract_priority("- [ ] A 🔺") == 1

    def test_dataview_wins_over_call_and_emoji(self):
        assert extract_priority("- [ ] A @priority(4) 🔺 [priority:: 2]") == 2

    def test_call_wins_over_emoji(self):
        assert extract_priority("- [ ] A 🔺 @priority(5)") == 5

    def test_first_emoji_in_line_wins(self):
        assert extract_priority("- [ ] A 🔽 then 🔺") == 4

    def test_custom_table(self):
        line = "- [ ] Buy milk #errand 📅 2024-09-28 ⏫"
        assert extract_priority(line, {3: "⏫"}) == 3
        assert PRIORITY_EMOJIS[2] == "⏫"
        assert extract_priority(line) == 2

    def test_three_digits_not_accepted(self):
        assert extract_priority("- [ ] A [priority:: 123]") == 0

    def test_empty_table(self):
        assert extract_priority("- [ ] A 🔺", {}) == 0

    def test_no_priority(self):
        assert extract_priority("- [ ] A") == 0


# ---------------------------------------------------------------------------
# Completion
# ---------------------------------------------------------------------------

class TestCompletion:
    def test_emoji_date(self):
        assert extract_completion_date("- [x] Done ✅ 2024-09-28") == "2024-09-28"

    def test_emoji_datetime_stops_at_whitespace(self):
        assert extract_completion_date("- [x] Done ✅ 2024-09-28T10:30 later") == "2024-09-28T10:30"

    def test_dataview_field(self):
        assert extract_completion_date("- [x] Done [completion:: 2024-09-28 10:00]") == "2024-09-28 10:00"

    def test_call_form(self):
        assert extract_completion_date("- [x] Done @completion( 2024-09-28 )") == "2024-09-28"

    def test_emoji_wins(self):
        line = "- [x] Done ✅ 2024-09-28 [completion:: 2024-10-01]"
        assert extract_completion_date(line) == "2024-09-28"

    def test_no_completion(self):
        assert extract_completion_date("- [x] Done") == ""


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------

class TestTags:
    def test_in_order(self):
        assert extract_tags("- [ ] Task #one #two") == ["#one", "#two"]

    def test_duplicates_kept(self):
        assert extract_tags("- [ ] Task #a #b #a") == ["#a", "#b", "#a"]

    def test_requires_preceding_whitespace(self):
        assert extract_tags("- [ ] Task#one") == []

    def test_token_stops_at_excluded_chars(self):
        assert extract_tags("- [ ] Task #tag(with) #x;y") == ["#tag", "#x"]

    def test_token_limited_to_twenty_chars(self):
        assert extract_tags("- [ ] Task #" + "a" * 25) == ["#" + "a" * 20]

    def test_bare_hash_ignored(self):
        assert extract_tags("- [ ] Task # heading-ish") == []

    def test_mark_markup_stripped(self):
        line = '- [ ] Task <mark style="background: #FFB8EBA6;">hi</mark> #real'
        assert extract_tags(line) == ["#real"]

    def test_font_markup_stripped(self):
        line = '- [ ] Task <font style="color: #ff0000">red</font> #x'
        assert extract_tags(line) == ["#x"]


# ---------------------------------------------------------------------------
# Body
# ---------------------------------------------------------------------------

class TestBody:
    def test_stops_at_blank_line(self):
        lines = ["- [x] Done task", "\t- [ ] subitem", "", "Next para"]
        assert extract_body(lines, 1) == ["\t- [ ] subitem"]

    def test_space_indentation(self):
        lines = ["- [ ] Task", "    first note", "    second note"]
        assert extract_body(lines, 1) == ["    first note", "    second note"]

    def test_shallow_spaces_not_body(self):
        assert extract_body(["- [ ] Task", "  two spaces"], 1) == []

    def test_configurable_indent(self):
        assert extract_body(["- [ ] Task", "  two spaces"], 1, indent_width=2) == ["  two spaces"]

    def test_stops_at_next_task(self):
        lines = ["- [ ] a", "\tnote", "- [ ] b", "\tother"]
        assert extract_body(lines, 1) == ["\tnote"]

    def test_whitespace_only_line_stops(self):
        assert extract_body(["- [ ] a", "   ", "\tnote"], 1) == []

    def test_start_past_end(self):
        assert extract_body(["- [ ] a"], 1) == []

    def test_deeper_indentation_kept_verbatim(self):
        lines = ["- [ ] a", "\t\tdeep", "        eight"]
        assert extract_body(lines, 1) == ["\t\tdeep", "        eight"]
