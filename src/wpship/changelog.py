# changelog.py
from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple


# 2024.nn.nn - version 1.2.3   /   2024.01.31 - version 1.2.3
_ENTRY_RE = re.compile(
    r"^(?P<date>[0-9]{4}[.-](?:nn|[0-9]{2})[.-](?:nn|[0-9]{2})|XXXX\.XX\.XX)\s*-\s*version\s+(?P<version>[0-9][0-9A-Za-z.\-]*)\s*$",
    re.MULTILINE,
)
_HEADER_VERSION_RE = re.compile(r"^[ \t/*#@]*Version:\s*(?P<version>\S+)", re.MULTILINE)


@dataclass
class ChangelogEntry:
    date: str
    version: str
    notes: List[str] = field(default_factory=list)

    @property
    def is_unreleased(self) -> bool:
        return "nn" in self.date or self.date.startswith("XXXX")


def parse_changelog(text: str) -> List[ChangelogEntry]:
    """Entries in file order (newest first, by convention)."""
    matches = list(_ENTRY_RE.finditer(text))
    entries: List[ChangelogEntry] = []
    for i, m in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        body = text[m.end():end]
        notes = [line.strip().lstrip("*").strip() for line in body.splitlines() if line.strip().startswith("*")]
        entries.append(ChangelogEntry(date=m.group("date"), version=m.group("version"), notes=notes))
    return entries


def plugin_version(main_file: str | Path) -> str:
    """Read the `Version:` header from the plugin's main file."""
    text = Path(main_file).read_text(encoding="utf-8")
    m = _HEADER_VERSION_RE.search(text)
    if not m:
        raise ValueError(f"No 'Version:' header found in {main_file}")
    return m.group("version")


def version_bump(changelog: str | Path) -> Optional[str]:
    """Version of the top changelog entry, i.e. the version being released."""
    p = Path(changelog)
    if not p.exists():
        return None
    entries = parse_changelog(p.read_text(encoding="utf-8"))
    return entries[0].version if entries else None


def is_prerelease(version: str) -> bool:
    return "-" in version


def base_version(version: str) -> str:
    return version.split("-", 1)[0]


def version_tuple(version: str) -> Tuple[int, ...]:
    parts = []
    for piece in base_version(version).split("."):
        m = re.match(r"\d+", piece)
        parts.append(int(m.group(0)) if m else 0)
    while len(parts) < 3:
        parts.append(0)
    return tuple(parts)


def prerelease_versions(version: str) -> List[str]:
    """
    Prerelease markers in the source tree that a release should replace,
    longest first so "1.2.0-dev.1" is replaced before "1.2.0-dev".
    Empty for a released version: its string also appears in history.
    """
    if not is_prerelease(version):
        return []
    versions = [version]
    dev = f"{base_version(version)}-dev"
    if dev not in versions:
        versions.append(dev)
    return sorted(versions, key=len, reverse=True)


def changelog_errors(changelog: str | Path, current_version: str) -> List[str]:
    """Reasons the plugin cannot be deployed; empty list means deployable."""
    p = Path(changelog)
    if not p.exists():
        return [f"{p.name} not found"]

    entries = parse_changelog(p.read_text(encoding="utf-8"))
    if not entries:
        return [f"No version entries found in {p.name}"]

    errors: List[str] = []
    top = entries[0]

    new, current = version_tuple(top.version), version_tuple(current_version)
    if is_prerelease(current_version):
        if new < current:
            errors.append(f"Changelog version {top.version} is lower than the current version {current_version}")
    elif new <= current:
        errors.append(f"Changelog version {top.version} is not greater than the current version {current_version}")

    if not top.notes:
        errors.append(f"Changelog entry for {top.version} has no notes")

    return errors
