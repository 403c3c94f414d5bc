"""Pure text renderer.

``render_frame`` turns a ``DashboardState`` into a ``Frame``: a list of
lines, each a tuple of ``Segment(text, style)``. Style names are resolved to
terminal attributes later by the painter in ``theme.py``; nothing here talks
to curses.
"""
import unicodedata
from collections import namedtuple

from .state import FIXED_CHROME_ROWS, Tab, check_exhaustive

Segment = namedtuple("Segment", "text style")

TITLE = " net-tui "
PLACEHOLDER = "loading..."
ELLIPSIS = "..."
HELP = "q quit • tab/1-3 switch • j/k navigate • g/G top/bottom • r refresh"
SEP = " "

# (header, width)
COLUMNS = check_exhaustive({
    Tab.CONNECTIONS: (("PROTO", 7), ("LOCAL", 21), ("REMOTE", 21), ("STATE", 11), ("PROCESS", 15)),
    Tab.PORTS: (("PORT", 7), ("PROTO", 7), ("ADDRESS", 16), ("PID", 8), ("PROCESS", 20)),
    Tab.INTERFACES: (("NAME", 12), ("STATE", 6), ("ADDRESS", 22), ("RX", 12), ("TX", 12)),
}, "COLUMNS")

FOOTER_NOUNS = check_exhaustive({
    Tab.CONNECTIONS: "connections",
    Tab.PORTS: "listening ports",
    Tab.INTERFACES: "interfaces",
}, "FOOTER_NOUNS")

BYTE_UNITS = "KMGTPE"


# --------------------------------------------------
# Formatting helpers
# --------------------------------------------------
def char_width(ch):
    # combining marks and format characters (ZWJ, variation selectors) take no cell
    if unicodedata.category(ch) in ("Mn", "Me", "Cf"):
        return 0
    if unicodedata.east_asian_width(ch) in ("W", "F"):
        return 2
    return 1


def display_width(s):
    """Terminal columns taken by ``s``."""
    return sum(char_width(ch) for ch in s)


def cut_to_width(s, width):
    """Longest prefix of ``s`` that fits in ``width`` columns."""
    used = 0
    for i, ch in enumerate(s):
        used += char_width(ch)
        if used > width:
            return s[:i]
    return s


def pad_visual(s, width):
    """Pad string accounting for double-width characters."""
    return s + " " * max(0, width - display_width(s))


def truncate(s, limit):
    """Cut ``s`` to ``limit`` columns, ending in '...' when there is room for it."""
    if display_width(s) <= limit:
        return s
    if limit <= len(ELLIPSIS):
        return cut_to_width(s, max(limit, 0))
    return cut_to_width(s, limit - len(ELLIPSIS)) + ELLIPSIS


def format_bytes(n):
    """1023 -> '1023 B', 1024 -> '1.0 KB', 1048576 -> '1.0 MB'."""
    unit = 1024
    if n < unit:
        return f"{n} B"
    div, exp = unit, 0
    q = n // unit
    while q >= unit and exp < len(BYTE_UNITS) - 1:
        div *= unit
        exp += 1
        q //= unit
    return f"{n / div:.1f} {BYTE_UNITS[exp]}B"


def _pid(pid):
    return str(pid) if pid else "-"


def connection_cells(c):
    return [(c.proto, None), (c.local, None), (c.remote, None), (c.state, None), (c.process, None)]


def port_cells(p):
    return [(str(p.port), None), (p.proto, None), (p.addr, None), (_pid(p.pid), None), (p.process, None)]


def interface_cells(i):
    state = ("up", "state_up") if i.up else ("down", "state_down")
    addr = i.addrs[0] if i.addrs else "-"
    return [(i.name, None), state, (addr, None), (format_bytes(i.rx), None), (format_bytes(i.tx), None)]


CELLS = check_exhaustive({
    Tab.CONNECTIONS: connection_cells,
    Tab.PORTS: port_cells,
    Tab.INTERFACES: interface_cells,
}, "CELLS")


# --------------------------------------------------
# Lines
# --------------------------------------------------
def line_width(line):
    return sum(display_width(s.text) for s in line)


def clip_line(line, width):
    out = []
    room = width
    for seg in line:
        if room <= 0:
            break
        text = cut_to_width(seg.text, room)
        room -= display_width(text)
        out.append(Segment(text, seg.style))
    return tuple(out)


def title_line(width, clock):
    gap = max(width - display_width(TITLE) - display_width(clock), 0)
    return (Segment(TITLE, "title"), Segment(" " * gap, "text"), Segment(clock, "dim"))


def tab_line(active):
    segs = []
    for t in Tab:
        if segs:
            segs.append(Segment(" ", "text"))
        style = "tab_active" if t == active else "tab_inactive"
        segs.append(Segment(f" {t.label} ", style))
    return tuple(segs)


def header_line(tab):
    cols = COLUMNS[tab]
    text = SEP.join(h.ljust(w) for h, w in cols[:-1])
    return (Segment(f"{text}{SEP}{cols[-1][0]}", "header"),)


def row_line(tab, record, selected, width):
    cols = COLUMNS[tab]
    segs = []
    for i, ((text, style), (_, w)) in enumerate(zip(CELLS[tab](record), cols)):
        cell = truncate(text, w)
        if i < len(cols) - 1:
            cell = pad_visual(cell, w) + SEP
        segs.append(Segment(cell, "selected" if selected else (style or "text")))
    if selected:
        pad = width - line_width(segs)
        if pad > 0:
            segs.append(Segment(" " * pad, "selected"))
    return tuple(segs)


def visible_range(offset, page, total):
    return offset, min(offset + page, total)


def render_frame(state, clock=""):
    """Render ``state`` into a Frame that fits ``state.width`` columns."""
    if state.width <= 0:
        return [(Segment(PLACEHOLDER, "dim"),)]

    tab = state.tab
    records = state.active_list
    page = max(state.height - FIXED_CHROME_ROWS, 1)

    lines = [
        title_line(state.width, clock),
        tab_line(tab),
        (),
        header_line(tab),
    ]
    start, end = visible_range(state.offset, page, len(records))
    for idx in range(start, end):
        lines.append(row_line(tab, records[idx], idx == state.cursor, state.width))
    lines.append(())
    lines.append((Segment(f"{len(records)} {FOOTER_NOUNS[tab]}", "dim"),))
    lines.append((Segment(HELP, "dim"),))
    return [clip_line(line, state.width) for line in lines]


def frame_text(frame):
    """Plain text of a frame, one string per line joined by newlines."""
    return "\n".join("".join(s.text for s in line) for line in frame)
