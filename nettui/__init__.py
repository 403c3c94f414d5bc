#!/usr/bin/env python3
import argparse
import curses
import os
import sys
from collections import namedtuple

import yaml

from .acquisition import PsutilAcquisition
from .app import Dashboard
from .debuglog import DEBUG_LOG_PATH, debug_log, set_debug_log_path
from .normalize import normalize
from .poller import POLL_INTERVAL
from .theme import DEFAULT_THEME, THEME_NAMES, get_theme

Settings = namedtuple("Settings", "interval theme once debug_log")


# --------------------------------------------------
# Checks
# --------------------------------------------------
def check_python_version():
    if sys.version_info < (3, 7):
        print("Python 3.7 or newer is required.", file=sys.stderr)
        sys.exit(1)


def _get_app_version():
    v_file = os.path.join(os.path.dirname(__file__), "VERSION")
    try:
        with open(v_file) as f:
            return f.read().strip()
    except OSError:
        return "0.0.0"


def _interval(value):
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")
    if seconds <= 0:
        raise argparse.ArgumentTypeError("interval must be greater than 0")
    return seconds


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="net-tui",
        description="Live terminal dashboard for connections, listening ports and interfaces.",
    )
    parser.add_argument("--version", action="version", version=f"net-tui {_get_app_version()}")
    parser.add_argument("--interval", type=_interval, default=POLL_INTERVAL,
                        help=f"Seconds between refreshes (default {POLL_INTERVAL:g})")
    parser.add_argument("--theme", choices=THEME_NAMES, default=DEFAULT_THEME,
                        help="Color theme")
    parser.add_argument("--once", action="store_true",
                        help="Print one snapshot as YAML and exit")
    parser.add_argument("--debug-log", metavar="PATH", default=DEBUG_LOG_PATH,
                        help="Append debug messages to PATH (also NET_TUI_DEBUG_LOG)")
    return parser.parse_args(argv)


def load_settings(args):
    return Settings(
        interval=args.interval,
        theme=args.theme,
        once=args.once,
        debug_log=args.debug_log,
    )


# --------------------------------------------------
# One-shot dump
# --------------------------------------------------
def snapshot_document(snapshot):
    return {
        "connections": [dict(r._asdict()) for r in snapshot.connections],
        "ports": [dict(r._asdict()) for r in snapshot.ports],
        "interfaces": [dict(r._asdict(), addrs=list(r.addrs)) for r in snapshot.interfaces],
    }


def dump_snapshot(acquisition, stream=None):
    """Run a single pass and write it as YAML (returns the text when no stream)."""
    doc = snapshot_document(normalize(acquisition))
    return yaml.safe_dump(doc, stream, sort_keys=False, default_flow_style=False)


# --------------------------------------------------
# Main
# --------------------------------------------------
def main(stdscr, settings):
    dashboard = Dashboard(
        PsutilAcquisition(),
        get_theme(settings.theme),
        interval=settings.interval,
    )
    dashboard.run(stdscr)


def cli_entry(argv=None):
    """terminal command 'net-tui' entry point"""
    check_python_version()
    settings = load_settings(parse_args(argv))
    set_debug_log_path(settings.debug_log)

    if settings.once:
        dump_snapshot(PsutilAcquisition(), sys.stdout)
        return 0

    try:
        curses.wrapper(main, settings)
    except KeyboardInterrupt:
        pass
    except curses.error as e:
        debug_log(f"MAIN: terminal failure: {e}")
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)
    return 0
