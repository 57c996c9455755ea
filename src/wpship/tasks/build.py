# tasks/build.py
from __future__ import annotations

import shutil
from pathlib import Path
from typing import Iterable, List

from ..changelog import plugin_version
from ..compress import zip_directory
from ..dsl import parallel, series
from ..errors import StepExecutionError
from ..model import RunContext
from ..replace import collect_files
from ..runner import TaskRunner
from .shell import release_version


# ----------------------------------------------------------------------
# Filesystem helpers
# ----------------------------------------------------------------------

def clean_dir(path: Path, keep: Iterable[str] = (".git", ".svn")) -> None:
    """Empty a directory, leaving VCS metadata in place. Creates it if missing."""
    path.mkdir(parents=True, exist_ok=True)
    keep = set(keep)
    for child in path.iterdir():
        if child.name in keep:
            continue
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()


def copy_tree(src: Path, dest: Path, exclude: Iterable[str] = ()) -> int:
    """Copy every non-excluded file under src into dest. Returns the file count."""
    files = collect_files(src, ["**/*"], exclude)
    for f in files:
        target = dest / f.resolve().relative_to(src.resolve())
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(f, target)
    return len(files)


def _build_excludes(ctx: RunContext) -> List[str]:
    excludes = list(ctx.config.paths.exclude)
    build_root = ctx.config.path(ctx.config.paths.build)
    try:
        rel = build_root.relative_to(ctx.config.src_path).as_posix()
        excludes.append(f"{rel}/**")
    except ValueError:
        pass  # build dir lives outside the source tree
    return excludes


def _svn_dir(ctx: RunContext, sub: str) -> Path:
    return ctx.config.wp_repo_path() / sub


# ----------------------------------------------------------------------
# Task bodies
# ----------------------------------------------------------------------

def clean_build(ctx: RunContext) -> None:
    build = ctx.config.build_path
    if build.exists():
        shutil.rmtree(build)
    build.mkdir(parents=True)


def clean_prerelease(ctx: RunContext) -> None:
    prerelease = ctx.config.path(ctx.config.paths.build) / ctx.config.paths.prerelease
    if prerelease.exists():
        ctx.console.print_info(f"Removing prerelease {prerelease}")
        shutil.rmtree(prerelease)


def copy_build(ctx: RunContext) -> None:
    count = copy_tree(ctx.config.src_path, ctx.config.build_path, _build_excludes(ctx))
    ctx.console.print_info(f"Copied {count} file(s) to {ctx.config.build_path}")


def build(ctx: RunContext):
    return series(
        "clean:build",
        parallel("scripts", "styles"),
        "copy:build",
    )


def compress(ctx: RunContext) -> None:
    version = ctx.options.version or plugin_version(ctx.config.main_file_path())
    slug = ctx.config.plugin.slug
    dest = ctx.config.path(ctx.config.paths.build) / f"{slug}.{version}.zip"
    zip_directory(ctx.config.build_path, dest, root_name=slug)
    ctx.options.zip_path = str(dest)
    ctx.console.print_info(f"Created {dest}")


def clean_wc_repo(ctx: RunContext) -> None:
    clean_dir(ctx.config.wc_repo_path())


def copy_wc_repo(ctx: RunContext) -> None:
    copy_tree(ctx.config.build_path, ctx.config.wc_repo_path())


def clean_wp_trunk(ctx: RunContext) -> None:
    clean_dir(_svn_dir(ctx, "trunk"))


def copy_wp_trunk(ctx: RunContext) -> None:
    copy_tree(ctx.config.build_path, _svn_dir(ctx, "trunk"))


def copy_wp_tag(ctx: RunContext) -> None:
    version = release_version(ctx)
    tag = _svn_dir(ctx, f"tags/{version}")
    if tag.exists():
        raise StepExecutionError(f"Tag {version} already exists in {tag.parent}")
    copy_tree(_svn_dir(ctx, "trunk"), tag, exclude=[".svn/**"])


def clean_wp_assets(ctx: RunContext) -> None:
    clean_dir(_svn_dir(ctx, "assets"))


def copy_wp_assets(ctx: RunContext) -> None:
    assets = ctx.config.path(ctx.config.paths.wp_assets)
    if not assets.is_dir():
        ctx.console.print_info(f"No assets directory at {assets}, skipping")
        return
    copy_tree(assets, _svn_dir(ctx, "assets"))


def register(runner: TaskRunner) -> None:
    runner.register("clean:build", clean_build, "Empty the build directory")
    runner.register("clean:prerelease", clean_prerelease, "Delete the prerelease build, if any")
    runner.register("copy:build", copy_build, "Copy plugin files to the build directory")
    runner.register("build", build, "Compile scripts/styles and copy the plugin to the build directory")
    runner.register("compress", compress, "Zip the build directory")
    runner.register("clean:wc_repo", clean_wc_repo, "Empty the WooCommerce repo clone")
    runner.register("copy:wc_repo", copy_wc_repo, "Copy the build into the WooCommerce repo clone")
    runner.register("clean:wp_trunk", clean_wp_trunk, "Empty SVN trunk")
    runner.register("copy:wp_trunk", copy_wp_trunk, "Copy the build into SVN trunk")
    runner.register("copy:wp_tag", copy_wp_tag, "Copy SVN trunk to tags/<version>")
    runner.register("clean:wp_assets", clean_wp_assets, "Empty the SVN assets dir")
    runner.register("copy:wp_assets", copy_wp_assets, "Copy plugin assets into SVN")
