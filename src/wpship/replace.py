# replace.py
from __future__ import annotations

import os
import re
import tempfile
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Pattern, Union


Replacement = Union[str, Callable[[re.Match], str]]


@dataclass(frozen=True)
class Rule:
    """One substitution: regex -> replacement (string template or callable)."""
    pattern: Pattern[str]
    replacement: Replacement
    count: int = 0  # 0 = replace all occurrences

    def apply(self, text: str) -> str:
        return self.pattern.sub(self.replacement, text, count=self.count)


def rule(pattern: str, replacement: Replacement, *, count: int = 0, flags: int = 0) -> Rule:
    return Rule(re.compile(pattern, flags), replacement, count)


def literal(match: str, replacement: str) -> Rule:
    """Replace an exact string (no regex semantics)."""
    return Rule(re.compile(re.escape(match)), lambda _m: replacement)


# ---------------------------------------------------------------------
# File selection
# ---------------------------------------------------------------------

def _matches_any(rel: str, globs: Iterable[str]) -> bool:
    rel_path = Path(rel)
    for g in globs:
        if rel_path.match(g):
            return True
        # "dir/**" should also exclude everything below dir
        if g.endswith("/**") and (rel == g[:-3] or rel.startswith(g[:-2])):
            return True
    return False


def collect_files(root: str | Path, include: Iterable[str], exclude: Iterable[str] = ()) -> List[Path]:
    """
    Expand include globs relative to root, dropping anything matching an
    exclude glob. Deterministic (sorted, de-duplicated).
    """
    root_p = Path(root).resolve()
    exclude = list(exclude)
    seen = set()
    out: List[Path] = []

    for pat in include:
        for p in sorted(root_p.glob(pat)):
            if not p.is_file():
                continue
            rel = p.resolve().relative_to(root_p).as_posix()
            if _matches_any(rel, exclude):
                continue
            if rel not in seen:
                seen.add(rel)
                out.append(p)
    return out


# ---------------------------------------------------------------------
# Rewriting
# ---------------------------------------------------------------------

def _atomic_write(path: Path, text: str) -> None:
    # temp file in the same dir so os.replace stays on one filesystem
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        os.replace(tmp, path)
    finally:
        if os.path.exists(tmp):
            os.unlink(tmp)


def rewrite_file(path: str | Path, rules: Iterable[Rule]) -> bool:
    """Apply rules to a single file. Returns True if its content changed."""
    p = Path(path)
    with p.open("r", encoding="utf-8", newline="") as f:
        original = f.read()

    text = original
    for r in rules:
        text = r.apply(text)

    if text == original:
        return False
    _atomic_write(p, text)
    return True


def rewrite_files(
    paths: Iterable[str | Path],
    rules: Iterable[Rule],
    *,
    only: Optional[Callable[[Path], bool]] = None,
) -> int:
    """
    Apply rules to every file (or only those `only` accepts).
    Returns the number of files modified.
    """
    rules = list(rules)
    modified = 0
    for path in paths:
        p = Path(path)
        if only is not None and not only(p):
            continue
        if rewrite_file(p, rules):
            modified += 1
    return modified


# ---------------------------------------------------------------------
# Prebuilt rule sets
# ---------------------------------------------------------------------

def minimum_wp_version(version: str) -> List[Rule]:
    return [
        rule(r"('minimum_wp_version'\s*=>\s*)'([^']*)'", lambda m: f"{m.group(1)}'{version}'"),
        rule(r"Requires at least: .*\n", f"Requires at least: {version}\n", count=1),
    ]


def tested_up_to_wp_version(version: str) -> List[Rule]:
    # case-sensitive, so "WC tested up to:" is left alone
    return [rule(r"Tested up to: .*\n", f"Tested up to: {version}\n", count=1)]


def minimum_wc_version(version: str) -> List[Rule]:
    return [
        rule(r"('minimum_wc_version'\s*=>\s*)'([^']*)'", lambda m: f"{m.group(1)}'{version}'"),
        rule(r"WC requires at least: .*\n", f"WC requires at least: {version}\n", count=1),
    ]


def tested_up_to_wc_version(version: str) -> List[Rule]:
    return [rule(r"WC tested up to: .*\n", f"WC tested up to: {version}\n", count=1)]


def framework_version(version: str) -> List[Rule]:
    return [
        rule(
            r"SV_WC_Framework_Bootstrap::instance\(\)->register_plugin\( '([^']*)'",
            lambda _m: f"SV_WC_Framework_Bootstrap::instance()->register_plugin( '{version}'",
        )
    ]


def backwards_compatible(version: str) -> List[Rule]:
    return [rule(r"('backwards_compatible'\s*=>\s*)'([^']*)'", lambda m: f"{m.group(1)}'{version}'")]


def release_date(today: Optional[date] = None) -> List[Rule]:
    """Date placeholders used in readme.txt / changelog.txt entries."""
    stamp = (today or date.today()).strftime("%Y.%m.%d")
    return [
        literal("XXXX.XX.XX", stamp),
        rule(r"[0-9]+\.nn\.nn", stamp, count=1),
        rule(r"[0-9]+-nn-nn", stamp, count=1),
    ]


def version_replacements(old_versions: Iterable[str], new_version: str) -> List[Rule]:
    return [literal(v, new_version) for v in old_versions]


def release_headers(old_version: str, new_version: str) -> List[Rule]:
    """
    Only the places that name the current release: the plugin `Version:`
    header, a `VERSION` constant and the readme `Stable tag:`. Other
    occurrences (@since tags, changelog history) are left untouched.
    """
    old = re.escape(old_version)
    return [
        rule(rf"^([ \t/*#@]*Version:[ \t]*){old}(?=\s)", lambda m: f"{m.group(1)}{new_version}",
             count=1, flags=re.MULTILINE),
        rule(rf"(\bVERSION\s*=\s*['\"]){old}(['\"])", lambda m: f"{m.group(1)}{new_version}{m.group(2)}"),
        rule(rf"^(Stable tag:[ \t]*){old}(?=\s)", lambda m: f"{m.group(1)}{new_version}",
             count=1, flags=re.MULTILINE),
    ]
