import os
import time

# Debug logging. Off until a path is configured (--debug-log or NET_TUI_DEBUG_LOG);
# curses owns the terminal so nothing can go to stdout/stderr while running.
DEBUG_LOG_PATH = os.environ.get("NET_TUI_DEBUG_LOG") or None


def set_debug_log_path(path):
    global DEBUG_LOG_PATH
    DEBUG_LOG_PATH = os.path.expanduser(path) if path else None


def debug_log(msg):
    """Write a timestamped message to the debug log."""
    if not DEBUG_LOG_PATH:
        return
    try:
        parent = os.path.dirname(DEBUG_LOG_PATH)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(DEBUG_LOG_PATH, "a") as f:
            f.write(f"[{time.strftime('%Y-%m-%d %H:%M:%S')}] {msg}\n")
    except OSError:
        pass
