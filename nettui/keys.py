import curses

from .state import Action

KEY_TAB = 9
KEY_CTRL_C = 3

KEYMAP = {
    ord('q'): Action.QUIT,
    KEY_CTRL_C: Action.QUIT,
    KEY_TAB: Action.TAB_NEXT,
    ord('l'): Action.TAB_NEXT,
    curses.KEY_RIGHT: Action.TAB_NEXT,
    curses.KEY_BTAB: Action.TAB_PREV,
    ord('h'): Action.TAB_PREV,
    curses.KEY_LEFT: Action.TAB_PREV,
    ord('j'): Action.DOWN,
    curses.KEY_DOWN: Action.DOWN,
    ord('k'): Action.UP,
    curses.KEY_UP: Action.UP,
    ord('g'): Action.TOP,
    curses.KEY_HOME: Action.TOP,
    ord('G'): Action.BOTTOM,
    curses.KEY_END: Action.BOTTOM,
    ord('1'): Action.SELECT_CONNECTIONS,
    ord('2'): Action.SELECT_PORTS,
    ord('3'): Action.SELECT_INTERFACES,
    ord('r'): Action.REFRESH,
}


def translate_key(k):
    """Map a curses key code to an ``Action``, or None for unbound keys."""
    return KEYMAP.get(k)
