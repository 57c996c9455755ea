from __future__ import annotations

from datetime import date
from pathlib import Path

from wpship import replace as rp


def test_collect_files_applies_excludes_below_directories(tmp_path: Path) -> None:
    (tmp_path / "lib" / "fw").mkdir(parents=True)
    (tmp_path / "includes").mkdir()
    (tmp_path / "plugin.php").write_text("<?php")
    (tmp_path / "includes" / "class-a.php").write_text("<?php")
    (tmp_path / "lib" / "fw" / "class-fw.php").write_text("<?php")

    files = rp.collect_files(tmp_path, ["**/*.php"], ["lib/**"])

    assert [f.relative_to(tmp_path).as_posix() for f in files] == ["includes/class-a.php", "plugin.php"]


def test_rewrite_files_counts_only_changed_files_and_leaves_no_temp_files(tmp_path: Path) -> None:
    a = tmp_path / "a.php"
    b = tmp_path / "b.php"
    a.write_text("const VERSION = '1.0.0-dev.1';\n")
    b.write_text("nothing to see\n")

    modified = rp.rewrite_files([a, b], rp.version_replacements(["1.0.0-dev.1"], "1.0.0"))

    assert modified == 1
    assert a.read_text() == "const VERSION = '1.0.0';\n"
    assert b.read_text() == "nothing to see\n"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["a.php", "b.php"]


def test_version_replacement_is_literal_not_regex(tmp_path: Path) -> None:
    f = tmp_path / "a.php"
    f.write_text("1.2.0-dev 1x2x0-dev\n")

    rp.rewrite_files([f], rp.version_replacements(["1.2.0-dev"], "1.2.0"))

    assert f.read_text() == "1.2.0 1x2x0-dev\n"


def test_tested_up_to_wp_leaves_wc_header_alone() -> None:
    text = "Tested up to: 6.1\nWC tested up to: 7.0\n"

    for r in rp.tested_up_to_wp_version("6.4"):
        text = r.apply(text)

    assert text == "Tested up to: 6.4\nWC tested up to: 7.0\n"


def test_minimum_versions_rewrite_both_array_and_header() -> None:
    text = (
        " * Requires at least: 5.6\n"
        " * WC requires at least: 6.0\n"
        "'minimum_wp_version' => '5.6',\n"
        "'minimum_wc_version'   =>   '6.0',\n"
    )

    for r in rp.minimum_wp_version("6.0") + rp.minimum_wc_version("7.5"):
        text = r.apply(text)

    assert text == (
        " * Requires at least: 6.0\n"
        " * WC requires at least: 7.5\n"
        "'minimum_wp_version' => '6.0',\n"
        "'minimum_wc_version'   =>   '7.5',\n"
    )


def test_framework_and_backwards_compatible_rules() -> None:
    text = (
        "SV_WC_Framework_Bootstrap::instance()->register_plugin( '5.4.0', __( 'X' ) );\n"
        "'backwards_compatible' => '4.4',\n"
    )

    for r in rp.framework_version("5.10.0") + rp.backwards_compatible("5.0"):
        text = r.apply(text)

    assert "register_plugin( '5.10.0'" in text
    assert "'backwards_compatible' => '5.0'" in text


def test_release_date_fills_placeholders() -> None:
    text = "2024.nn.nn - version 1.2.0\nXXXX.XX.XX\n2024-nn-nn\n"

    for r in rp.release_date(date(2024, 3, 9)):
        text = r.apply(text)

    assert text == "2024.03.09 - version 1.2.0\n2024.03.09\n2024.03.09\n"


def test_rewrite_files_only_filter(tmp_path: Path) -> None:
    readme = tmp_path / "readme.txt"
    php = tmp_path / "plugin.php"
    readme.write_text("XXXX.XX.XX\n")
    php.write_text("XXXX.XX.XX\n")

    modified = rp.rewrite_files(
        [readme, php], rp.release_date(date(2024, 1, 2)), only=lambda p: p.name == "readme.txt"
    )

    assert modified == 1
    assert readme.read_text() == "2024.01.02\n"
    assert php.read_text() == "XXXX.XX.XX\n"
