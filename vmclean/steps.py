"""
Cleanup step actions and the canonical step order.

Each action takes the shared StepContext and performs its side effects.
Absent packages and already-clean directories are normal outcomes, not
errors.
"""

from typing import Iterator

from vmclean import capabilities as caps
from vmclean.filesystem import purge_contents, remove_paths, sweep_logs, zero_fill
from vmclean.pipeline import PipelineStep, StepContext
from vmclean.ui import console, show_warning, spinner

APT_GET = "apt-get"

CHROMIUM_PACKAGES = ("chromium", "chromium-common", "chromium-browser")

# Name globs handed to apt-get, which expands them against the package index
DESKTOP_APP_PATTERNS = ("libreoffice*", "thunderbird*", "hexchat*", "gimp*")

BRAVE_CACHE_SUBPATH = ("BraveSoftware", "Brave-Browser")


# ---------------------------------------------------------------------------
# Package manager
# ---------------------------------------------------------------------------


def _apt_sweep(ctx: StepContext) -> None:
    for subcommand in (["autoremove", "--purge"], ["autoclean"], ["clean"]):
        ctx.runner.run([APT_GET, "-y", *subcommand])


def apt_cleanup(ctx: StepContext) -> None:
    ctx.runner.run([APT_GET, "-y", "update"], quiet=True)
    _apt_sweep(ctx)


def final_apt_sweep(ctx: StepContext) -> None:
    _apt_sweep(ctx)


def clear_apt_lists(ctx: StepContext) -> None:
    removed = purge_contents(ctx.paths.apt_lists_dir)
    console.secondary(f"Removed {removed} entries from {ctx.paths.apt_lists_dir}")


def remove_desktop_apps(ctx: StepContext) -> None:
    ctx.runner.run([APT_GET, "-y", "remove", "--purge", *DESKTOP_APP_PATTERNS], quiet=True)


# ---------------------------------------------------------------------------
# Browsers, temp files and user caches
# ---------------------------------------------------------------------------


def remove_chromium(ctx: StepContext) -> None:
    ctx.runner.run([APT_GET, "-y", "remove", "--purge", *CHROMIUM_PACKAGES], quiet=True)
    home = ctx.identity
    remove_paths([home.config_dir / "chromium", home.cache_dir / "chromium"])


def trim_brave_cache(ctx: StepContext) -> None:
    # Only the cache tree; the profile lives under ~/.config/BraveSoftware
    cache_dir = ctx.identity.cache_dir.joinpath(*BRAVE_CACHE_SUBPATH)
    removed = purge_contents(cache_dir, within=ctx.identity.cache_dir)
    console.secondary(f"Removed {removed} entries from {cache_dir}")


def sweep_temp(ctx: StepContext) -> None:
    user_cache = ctx.identity.cache_dir
    for directory, root in ((ctx.paths.tmp_dir, None), (user_cache, user_cache)):
        removed = purge_contents(directory, within=root)
        console.secondary(f"Removed {removed} entries from {directory}")


# ---------------------------------------------------------------------------
# Logs
# ---------------------------------------------------------------------------


def rotate_logs(ctx: StepContext) -> None:
    if ctx.capabilities.has(caps.JOURNALCTL):
        ctx.runner.run(["journalctl", f"--vacuum-time={ctx.config.journal_vacuum_window}"])
    else:
        console.secondary("journalctl not found, skipping journal vacuum")

    result = sweep_logs(ctx.paths.log_dir)
    console.secondary(
        f"Deleted {len(result.deleted)} rotated logs, truncated {len(result.truncated)} active logs"
    )


# ---------------------------------------------------------------------------
# Optional ecosystems
# ---------------------------------------------------------------------------


def prune_docker(ctx: StepContext) -> None:
    ctx.runner.run(["docker", "system", "prune", "-a", "--volumes", "-f"])


def parse_disabled_snaps(listing: str) -> Iterator[tuple[str, str]]:
    """Yield (name, revision) for disabled rows of `snap list --all`."""
    for line in listing.splitlines()[1:]:
        columns = line.split()
        if len(columns) >= 3 and "disabled" in line:
            yield columns[0], columns[2]


def prune_snap(ctx: StepContext) -> None:
    listing = ctx.runner.run(["snap", "list", "--all"], capture=True)
    if not listing.ok:
        console.warning("Could not list snaps, nothing removed")
        return

    revisions = list(parse_disabled_snaps(listing.stdout))
    if not revisions:
        console.secondary("No disabled snap revisions")
    for name, revision in revisions:
        ctx.runner.run(["snap", "remove", name, f"--revision={revision}"])


def prune_flatpak(ctx: StepContext) -> None:
    ctx.runner.run(["flatpak", "uninstall", "--unused", "-y"])


# ---------------------------------------------------------------------------
# Free space reclamation
# ---------------------------------------------------------------------------


def reclaim_free_space(ctx: StepContext) -> None:
    if ctx.capabilities.has(caps.FSTRIM):
        console.secondary("Running fstrim (preferred on SSD/VM backends)")
        ctx.runner.run(["fstrim", "-av"])
        return

    show_warning(
        "Zero-filling free space",
        "This will temporarily fill the disk; that's expected.",
        details=[f"Fill file: {ctx.paths.zero_fill_file}"],
    )
    with spinner("Writing zeros until the disk is full..."):
        written = zero_fill(ctx.paths.zero_fill_file)
    console.success(f"Zero-fill complete ({written // (1024 * 1024)} MiB written)")


def report_usage(title: str):
    def action(ctx: StepContext) -> None:
        ctx.reporter.report(title)

    return action


def report_after_cleanup(ctx: StepContext) -> None:
    # Without reclamation this snapshot is also the final one
    if ctx.config.reclaim_free_space:
        ctx.reporter.report("Disk usage AFTER cleanup (pre-trim/zero-fill)")
    else:
        ctx.reporter.report("Disk usage AFTER cleanup (final)")


# ---------------------------------------------------------------------------
# Canonical order
# ---------------------------------------------------------------------------


def _flag_and_tool(flag: str, tool: str):
    def gate(ctx: StepContext) -> bool:
        return getattr(ctx.config, flag) and ctx.capabilities.has(tool)

    return gate


def _reclaim_enabled(ctx: StepContext) -> bool:
    return ctx.config.reclaim_free_space


def build_steps() -> list[PipelineStep]:
    """Return the cleanup steps in execution order.

    Free-space reclamation comes after every deletion so it sees the most
    free space.
    """
    return [
        PipelineStep("usage-before", "Disk usage BEFORE", report_usage("Disk usage BEFORE")),
        PipelineStep("apt-cleanup", "APT cleanup (autoremove/autoclean/clean)", apt_cleanup),
        PipelineStep("remove-chromium", "Remove Chromium (packages + user cache) if present", remove_chromium),
        PipelineStep("trim-brave-cache", "Trim Brave cache (keeps profile/bookmarks)", trim_brave_cache),
        PipelineStep("sweep-temp", "Clear /tmp and user caches", sweep_temp),
        PipelineStep("rotate-logs", "Journal and log rotation cleanup", rotate_logs),
        PipelineStep("clear-apt-lists", "Clean apt list residue (regenerated on next apt update)", clear_apt_lists),
        PipelineStep(
            "prune-docker",
            "Docker system prune (containers, images, volumes)",
            prune_docker,
            enabled=_flag_and_tool("prune_containers", caps.DOCKER),
            skip_message="Docker prune skipped (use --include-containers to enable; requires docker).",
        ),
        PipelineStep(
            "prune-snap",
            "Snap old revision cleanup",
            prune_snap,
            enabled=_flag_and_tool("prune_snap_packages", caps.SNAP),
            skip_message="Snap prune skipped (use --include-snap-packages to enable; requires snap).",
        ),
        PipelineStep(
            "prune-flatpak",
            "Flatpak uninstall --unused",
            prune_flatpak,
            enabled=_flag_and_tool("prune_flatpak_packages", caps.FLATPAK),
            skip_message="Flatpak prune skipped (use --include-flatpak-packages to enable; requires flatpak).",
        ),
        PipelineStep("remove-desktop-apps", "Remove heavy optional desktop apps if installed", remove_desktop_apps),
        PipelineStep("final-apt-sweep", "Final autoremove/clean sweep", final_apt_sweep),
        PipelineStep("usage-after-cleanup", "Disk usage AFTER cleanup", report_after_cleanup),
        PipelineStep(
            "reclaim-free-space",
            "Reclaim free space (fstrim or zero-fill)",
            reclaim_free_space,
            enabled=_reclaim_enabled,
            skip_message="Skipped fstrim/zero-fill (--disable-space-reclaim).",
        ),
        PipelineStep(
            "usage-after-reclaim",
            "Disk usage AFTER trim/zero-fill",
            report_usage("Disk usage AFTER trim/zero-fill"),
            enabled=_reclaim_enabled,
        ),
    ]
