from __future__ import annotations

from pathlib import Path

import pytest

from wpship import changelog


CHANGELOG = """*** Example Changelog ***

2024.nn.nn - version 1.3.0
 * Feature - Something new
 * Fix - Something old

2024.01.15 - version 1.2.0
 * Fix - Rounding
"""


def _write(tmp_path: Path, text: str) -> Path:
    p = tmp_path / "changelog.txt"
    p.write_text(text, encoding="utf-8")
    return p


def test_parse_changelog_reads_entries_and_notes() -> None:
    entries = changelog.parse_changelog(CHANGELOG)

    assert [(e.version, e.is_unreleased) for e in entries] == [("1.3.0", True), ("1.2.0", False)]
    assert entries[0].notes == ["Feature - Something new", "Fix - Something old"]


def test_version_bump_is_top_entry(tmp_path: Path) -> None:
    assert changelog.version_bump(_write(tmp_path, CHANGELOG)) == "1.3.0"
    assert changelog.version_bump(tmp_path / "missing.txt") is None


def test_plugin_version_reads_header(tmp_path: Path) -> None:
    main = tmp_path / "plugin.php"
    main.write_text("<?php\n/**\n * Plugin Name: X\n * Version: 2.0.1-dev.3\n */\n")

    assert changelog.plugin_version(main) == "2.0.1-dev.3"


def test_plugin_version_without_header_raises(tmp_path: Path) -> None:
    main = tmp_path / "plugin.php"
    main.write_text("<?php\n")

    with pytest.raises(ValueError, match="No 'Version:' header"):
        changelog.plugin_version(main)


def test_prerelease_versions_longest_first() -> None:
    assert changelog.prerelease_versions("1.2.0-dev.1") == ["1.2.0-dev.1", "1.2.0-dev"]
    assert changelog.prerelease_versions("1.2.0") == []


@pytest.mark.parametrize(
    ("current", "deployable"),
    [
        ("1.3.0-dev.1", True),   # prerelease of the version being released
        ("1.2.0", True),
        ("1.3.0", False),        # already released
        ("1.4.0-dev.1", False),  # changelog is behind
    ],
)
def test_changelog_errors_compare_against_current_version(tmp_path: Path, current: str, deployable: bool) -> None:
    assert (changelog.changelog_errors(_write(tmp_path, CHANGELOG), current) == []) is deployable


def test_changelog_errors_reports_missing_notes(tmp_path: Path) -> None:
    path = _write(tmp_path, "2024.nn.nn - version 1.3.0\n\n2024.01.15 - version 1.2.0\n * Fix\n")

    assert changelog.changelog_errors(path, "1.2.0") == ["Changelog entry for 1.3.0 has no notes"]


def test_changelog_errors_for_missing_file_and_entries(tmp_path: Path) -> None:
    assert changelog.changelog_errors(tmp_path / "changelog.txt", "1.0.0") == ["changelog.txt not found"]
    assert changelog.changelog_errors(_write(tmp_path, "nothing\n"), "1.0.0") == [
        "No version entries found in changelog.txt"
    ]
