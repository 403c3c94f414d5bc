import curses
from collections import namedtuple
from types import MappingProxyType

from .render import cut_to_width, display_width

# --------------------------------------------------
# 🎨 Themes & Colors
# --------------------------------------------------
# fg/bg for 256-color terminals, then the 8-color fallback (-1 = terminal default)
StyleSpec = namedtuple("StyleSpec", "fg256 bg256 fg8 bg8 attrs")
Theme = namedtuple("Theme", "name styles")

ROLES = (
    "text", "title", "dim", "header", "selected",
    "tab_active", "tab_inactive", "state_up", "state_down",
)

# Used when the terminal has no colors at all
MONO_ATTRS = MappingProxyType({
    "title": curses.A_BOLD,
    "dim": curses.A_DIM,
    "header": curses.A_BOLD,
    "selected": curses.A_REVERSE | curses.A_BOLD,
    "tab_active": curses.A_REVERSE | curses.A_BOLD,
    "tab_inactive": curses.A_DIM,
    "state_up": curses.A_BOLD,
})


def _theme(name, styles):
    missing = set(ROLES) - set(styles)
    if missing:
        raise ValueError(f"theme {name!r} is missing roles: {sorted(missing)}")
    return Theme(name, MappingProxyType(dict(styles)))


THEMES = (
    _theme("nord", {
        "text": StyleSpec(253, -1, curses.COLOR_WHITE, -1, curses.A_NORMAL),
        "title": StyleSpec(110, -1, curses.COLOR_CYAN, -1, curses.A_BOLD),
        "dim": StyleSpec(240, -1, curses.COLOR_WHITE, -1, curses.A_DIM),
        "header": StyleSpec(109, -1, curses.COLOR_BLUE, -1, curses.A_BOLD),
        "selected": StyleSpec(236, 110, curses.COLOR_BLACK, curses.COLOR_CYAN, curses.A_BOLD),
        "tab_active": StyleSpec(110, 237, curses.COLOR_CYAN, curses.COLOR_BLACK, curses.A_BOLD),
        "tab_inactive": StyleSpec(240, -1, curses.COLOR_WHITE, -1, curses.A_DIM),
        "state_up": StyleSpec(144, -1, curses.COLOR_GREEN, -1, curses.A_NORMAL),
        "state_down": StyleSpec(131, -1, curses.COLOR_RED, -1, curses.A_NORMAL),
    }),
    _theme("gruvbox", {
        "text": StyleSpec(223, -1, curses.COLOR_WHITE, -1, curses.A_NORMAL),
        "title": StyleSpec(214, -1, curses.COLOR_YELLOW, -1, curses.A_BOLD),
        "dim": StyleSpec(246, -1, curses.COLOR_WHITE, -1, curses.A_DIM),
        "header": StyleSpec(214, -1, curses.COLOR_YELLOW, -1, curses.A_BOLD),
        "selected": StyleSpec(235, 214, curses.COLOR_BLACK, curses.COLOR_YELLOW, curses.A_BOLD),
        "tab_active": StyleSpec(214, 237, curses.COLOR_YELLOW, curses.COLOR_BLACK, curses.A_BOLD),
        "tab_inactive": StyleSpec(246, -1, curses.COLOR_WHITE, -1, curses.A_DIM),
        "state_up": StyleSpec(142, -1, curses.COLOR_GREEN, -1, curses.A_NORMAL),
        "state_down": StyleSpec(167, -1, curses.COLOR_RED, -1, curses.A_NORMAL),
    }),
)

THEME_NAMES = tuple(t.name for t in THEMES)
DEFAULT_THEME = "nord"


def get_theme(name):
    for t in THEMES:
        if t.name == name:
            return t
    raise KeyError(name)


class Palette:
    """curses attributes for each style role of one theme.

    Build it once after curses is initialized; color pairs are allocated in
    ROLES order starting at 1 (pair 0 is reserved).
    """

    def __init__(self, theme):
        self.theme = theme
        self._attrs = {}

    def setup(self):
        if not curses.has_colors():
            self._attrs = dict(MONO_ATTRS)
            return self
        try:
            curses.use_default_colors()
        except curses.error:
            pass
        use_256 = curses.COLORS >= 256
        for pair_id, role in enumerate(ROLES, start=1):
            style = self.theme.styles[role]
            fg, bg = (style.fg256, style.bg256) if use_256 else (style.fg8, style.bg8)
            attr = style.attrs
            try:
                curses.init_pair(pair_id, fg, bg)
                attr |= curses.color_pair(pair_id)
            except curses.error:
                attr |= MONO_ATTRS.get(role, curses.A_NORMAL)
            self._attrs[role] = attr
        return self

    def attr(self, style):
        return self._attrs.get(style, curses.A_NORMAL)


def paint(stdscr, frame, palette):
    """Draw a rendered frame onto the whole screen."""
    stdscr.erase()
    h, w = stdscr.getmaxyx()
    for y, line in enumerate(frame[:h]):
        x = 0
        for seg in line:
            if not seg.text or x >= w:
                continue
            text = cut_to_width(seg.text, w - x)
            if text:
                try:
                    stdscr.addstr(y, x, text, palette.attr(seg.style))
                except curses.error:
                    # writing the bottom-right cell moves the cursor off screen
                    pass
            x += display_width(seg.text)
    stdscr.noutrefresh()
    curses.doupdate()
