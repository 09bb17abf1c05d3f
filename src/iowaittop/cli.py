"""Command line entry point for iowaittop."""

import math
from pathlib import Path

import click

from iowaittop import logging as iowaittop_logging
from iowaittop.config import Config
from iowaittop.errors import ConfigError, EnumerationError
from iowaittop.monitor import IowaitMonitor
from iowaittop.procfs import set_proc_root


@click.command()
@click.option(
    "--interval",
    "-i",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds between frames",
)
@click.option("--count", "-n", type=click.IntRange(min=1), default=None, help="Rows per frame")
@click.option(
    "--proc-root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Proc filesystem to read (default /proc)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="TOML config file (default ~/.config/iowaittop/config.toml)",
)
@click.option("--tui", is_flag=True, help="Interactive table instead of plain frames")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging on stderr")
@click.version_option(package_name="iowaittop")
def main(
    interval: float | None,
    count: int | None,
    proc_root: Path | None,
    config_path: Path | None,
    tui: bool,
    verbose: bool,
) -> None:
    """Show the processes whose I/O-wait count grew the most each interval."""
    try:
        config = Config.load(config_path)
    except ConfigError as e:
        raise click.UsageError(str(e)) from e

    if interval is not None:
        if not math.isfinite(interval):
            raise click.BadParameter("must be a finite number", param_hint="--interval")
        config.monitor.interval = interval
    if count is not None:
        config.monitor.count = count
    if proc_root is not None:
        config.monitor.proc_root = str(proc_root)

    iowaittop_logging.configure("DEBUG" if verbose else config.logging.level)
    log = iowaittop_logging.get_logger(__name__)
    set_proc_root(config.monitor.proc_root)

    monitor = IowaitMonitor(interval=config.monitor.interval, limit=config.monitor.count)
    log.debug(
        "starting",
        interval=monitor.interval,
        count=monitor.limit,
        proc_root=config.monitor.proc_root,
    )

    if tui:
        from iowaittop.app import IowaitTopApp

        app = IowaitTopApp(monitor)
        app.run()
        if app.return_code:
            raise SystemExit(app.return_code)
        return

    from iowaittop.display import render_frame

    try:
        monitor.run(render_frame)
    except EnumerationError as e:
        log.error("process enumeration failed", error=str(e))
        click.echo(str(e), err=True)
        raise SystemExit(1) from e
    except KeyboardInterrupt:
        monitor.stop()


if __name__ == "__main__":
    main()
