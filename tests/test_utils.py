"""
Tests for utils/: dates.py, ids.py, filters.py.
"""

import sys
from pathlib import Path

# Add src to path so imports work without installation
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from taskboard_index.utils import ids as ids_module
from taskboard_index.utils.dates import matches_date_format, moment_to_strftime, parse_strict
from taskboard_index.utils.filters import (
    POLARITY_DISABLED,
    POLARITY_EXCLUDE,
    POLARITY_ONLY,
    FilterList,
    ScanFilters,
    scan_filter_for_files_and_folders,
    scan_filter_for_tags,
)
from taskboard_index.utils.ids import TaskIdSource, generate_task_id


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

class TestMomentFormat:
    def test_tokens(self):
        assert moment_to_strftime("YYYY-MM-DD") == "%Y-%m-%d"
        assert moment_to_strftime("DD.MM.YYYY") == "%d.%m.%Y"
        assert moment_to_strftime("YYYY-MM-DD dddd") == "%Y-%m-%d %A"
        assert moment_to_strftime("MMM D") == "%b D"

    def test_bracketed_literal(self):
        assert moment_to_strftime("[Week] YYYY") == "Week %Y"

    def test_percent_escaped(self):
        assert moment_to_strftime("YYYY%") == "%Y%%"


class TestStrictMatch:
    def test_exact_match(self):
        assert matches_date_format("2024-09-28", "YYYY-MM-DD")
        assert parse_strict("2024-09-28", "YYYY-MM-DD").day == 28

    def test_unpadded_rejected(self):
        assert not matches_date_format("2024-9-28", "YYYY-MM-DD")

    def test_wrong_order_rejected(self):
        assert not matches_date_format("28-09-2024", "YYYY-MM-DD")

    def test_impossible_date_rejected(self):
        assert not matches_date_format("2024-02-30", "YYYY-MM-DD")

    def test_plain_name_rejected(self):
        assert not matches_date_format("Meeting notes", "YYYY-MM-DD")

    def test_empty_inputs(self):
        assert parse_strict("", "YYYY-MM-DD") is None
        assert parse_strict("2024-09-28", "") is None


# ---------------------------------------------------------------------------
# IDs
# ---------------------------------------------------------------------------

class TestTaskIds:
    def test_unsigned_32_bit(self):
        for _ in range(100):
            assert 0 <= generate_task_id() < 2 ** 32

    def test_redraws_on_collision(self, monkeypatch):
        draws = iter([5, 5, 7, 7, 9])
        monkeypatch.setattr(ids_module, "generate_task_id", lambda: next(draws))
        source = TaskIdSource(reserved=[5])
        assert source.next_id() == 7
        assert source.next_id() == 9
        assert 7 in source and 9 in source and 5 in source

    def test_issued_ids_unique(self):
        source = TaskIdSource()
        issued = [source.next_id() for _ in range(1000)]
        assert len(set(issued)) == 1000


# ---------------------------------------------------------------------------
# Scan filters
# ---------------------------------------------------------------------------

def _filters(**lists):
    return ScanFilters(**{k: FilterList(p, v) for k, (p, v) in lists.items()})


class TestFileFolderFilter:
    def test_defaults_accept_everything(self):
        assert scan_filter_for_files_and_folders("any/doc.md", None, ScanFilters())

    def test_only_files(self):
        f = _filters(files=(POLARITY_ONLY, ["a.md"]))
        assert scan_filter_for_files_and_folders("a.md", None, f)
        assert not scan_filter_for_files_and_folders("b.md", None, f)

    def test_exclude_files(self):
        f = _filters(files=(POLARITY_EXCLUDE, ["a.md"]))
        assert not scan_filter_for_files_and_folders("a.md", None, f)
        assert scan_filter_for_files_and_folders("b.md", None, f)

    def test_only_folders_includes_nested(self):
        f = _filters(folders=(POLARITY_ONLY, ["projects"]))
        assert scan_filter_for_files_and_folders("projects/x.md", None, f)
        assert scan_filter_for_files_and_folders("projects/sub/y.md", None, f)
        assert not scan_filter_for_files_and_folders("other/z.md", None, f)
        assert not scan_filter_for_files_and_folders("projectsX/a.md", None, f)

    def test_exclude_folders(self):
        f = _filters(folders=(POLARITY_EXCLUDE, ["archive/"]))
        assert not scan_filter_for_files_and_folders("archive/old.md", None, f)
        assert scan_filter_for_files_and_folders("notes/a.md", None, f)

    def test_file_entry_decides_before_folder(self):
        f = _filters(
            files=(POLARITY_ONLY, ["archive/keep.md"]),
            folders=(POLARITY_EXCLUDE, ["archive"]),
        )
        assert scan_filter_for_files_and_folders("archive/keep.md", None, f)
        assert not scan_filter_for_files_and_folders("archive/other.md", None, f)

    def test_disabled_list_ignored(self):
        f = _filters(files=(POLARITY_DISABLED, ["a.md"]))
        assert scan_filter_for_files_and_folders("b.md", None, f)


class TestTagFilter:
    def test_inactive_accepts(self):
        assert scan_filter_for_tags([], ScanFilters())
        assert scan_filter_for_tags(["#x"], ScanFilters())

    def test_only_tags(self):
        f = _filters(tags=(POLARITY_ONLY, ["#work"]))
        assert scan_filter_for_tags(["#work"], f)
        assert scan_filter_for_tags(["#Work", "#other"], f)
        assert not scan_filter_for_tags(["#home"], f)
        assert not scan_filter_for_tags([], f)

    def test_exclude_tags_without_hash(self):
        f = _filters(tags=(POLARITY_EXCLUDE, ["skip"]))
        assert not scan_filter_for_tags(["#skip"], f)
        assert scan_filter_for_tags(["#x"], f)
        assert scan_filter_for_tags([], f)


class TestFilterConfig:
    def test_from_dict(self):
        f = ScanFilters.from_dict({"folders": {"polarity": 2, "values": ["archive"]}})
        assert f.folders.polarity == POLARITY_EXCLUDE
        assert f.folders.values == ["archive"]
        assert not f.files.active
        assert not f.tags.active

    def test_invalid_polarity(self):
        with pytest.raises(ValueError):
            FilterList.from_dict({"polarity": 7, "values": ["a"]})
