"""Navigation state machine.

``update(state, event)`` is the only way the dashboard state changes. It is a
pure function: the coordinator thread calls it for every event it pulls off
the queue, in arrival order, and keeps the returned value.
"""
import enum
from collections import namedtuple
from dataclasses import dataclass, replace

from .normalize import EMPTY_SNAPSHOT, Snapshot


class Tab(enum.IntEnum):
    CONNECTIONS = 0
    PORTS = 1
    INTERFACES = 2

    @property
    def label(self):
        return TAB_LABELS[self]


class Action(enum.Enum):
    QUIT = "quit"
    TAB_NEXT = "tab_next"
    TAB_PREV = "tab_prev"
    DOWN = "down"
    UP = "up"
    TOP = "top"
    BOTTOM = "bottom"
    SELECT_CONNECTIONS = "select_connections"
    SELECT_PORTS = "select_ports"
    SELECT_INTERFACES = "select_interfaces"
    REFRESH = "refresh"


KeyEvent = namedtuple("KeyEvent", "action")
ResizeEvent = namedtuple("ResizeEvent", "width height")
TickEvent = namedtuple("TickEvent", "")
DataEvent = namedtuple("DataEvent", "snapshot")
# a pass that crashed; carries the error text, the state keeps its last snapshot
PollFailedEvent = namedtuple("PollFailedEvent", "error")

# header + tab bar + blank + column header + blank + count + key help
FIXED_CHROME_ROWS = 7


def check_exhaustive(table, name):
    """Fail loudly if a per-tab table misses (or invents) a tab."""
    keys = set(table)
    if keys != set(Tab):
        missing = sorted(t.name for t in set(Tab) - keys)
        extra = sorted(repr(k) for k in keys - set(Tab))
        raise RuntimeError(f"{name} does not cover every tab (missing={missing}, extra={extra})")
    return table


TAB_LABELS = check_exhaustive({
    Tab.CONNECTIONS: "Connections",
    Tab.PORTS: "Ports",
    Tab.INTERFACES: "Interfaces",
}, "TAB_LABELS")

LIST_FIELDS = check_exhaustive({
    Tab.CONNECTIONS: "connections",
    Tab.PORTS: "ports",
    Tab.INTERFACES: "interfaces",
}, "LIST_FIELDS")

DIRECT_TABS = {
    Action.SELECT_CONNECTIONS: Tab.CONNECTIONS,
    Action.SELECT_PORTS: Tab.PORTS,
    Action.SELECT_INTERFACES: Tab.INTERFACES,
}
# every tab must be reachable by a direct key
check_exhaustive(set(DIRECT_TABS.values()), "DIRECT_TABS")


@dataclass(frozen=True)
class DashboardState:
    tab: Tab = Tab.CONNECTIONS
    cursor: int = 0
    offset: int = 0
    width: int = 0
    height: int = 0
    snapshot: Snapshot = EMPTY_SNAPSHOT
    quit: bool = False

    @property
    def active_list(self):
        return getattr(self.snapshot, LIST_FIELDS[self.tab])

    @property
    def page_size(self):
        return page_size(self.height)


def page_size(height):
    return max(height - FIXED_CHROME_ROWS, 1)


def clamp_cursor(cursor, length):
    return max(0, min(cursor, length - 1))


def follow(cursor, offset, page):
    """Scroll-follow: move ``offset`` just enough to keep ``cursor`` on screen."""
    page = max(page, 1)
    if cursor < offset:
        return cursor
    if cursor >= offset + page:
        return cursor - page + 1
    return offset


def _settle(state, cursor=None, offset=None):
    cursor = state.cursor if cursor is None else cursor
    offset = state.offset if offset is None else offset
    cursor = clamp_cursor(cursor, len(state.active_list))
    offset = follow(cursor, offset, state.page_size)
    return replace(state, cursor=cursor, offset=offset)


def _on_key(state, action):
    if action is Action.QUIT:
        return replace(state, quit=True)
    if action is Action.TAB_NEXT:
        return replace(state, tab=Tab((state.tab + 1) % len(Tab)), cursor=0, offset=0)
    if action is Action.TAB_PREV:
        return replace(state, tab=Tab((state.tab - 1) % len(Tab)), cursor=0, offset=0)
    if action in DIRECT_TABS:
        return replace(state, tab=DIRECT_TABS[action], cursor=0, offset=0)
    if action is Action.DOWN:
        return _settle(state, cursor=state.cursor + 1)
    if action is Action.UP:
        return _settle(state, cursor=max(state.cursor - 1, 0))
    if action is Action.TOP:
        return replace(state, cursor=0, offset=0)
    if action is Action.BOTTOM:
        return _settle(state, cursor=len(state.active_list) - 1)
    # REFRESH is handled by the coordinator, the state doesn't change
    return state


def update(state, event):
    """Return the state that follows ``state`` after ``event``."""
    if isinstance(event, KeyEvent):
        return _on_key(state, event.action)
    if isinstance(event, ResizeEvent):
        return _settle(replace(state, width=event.width, height=event.height))
    if isinstance(event, DataEvent):
        return _settle(replace(state, snapshot=event.snapshot))
    return state
