"""The coordinator: one thread, one ordered event queue, one state value.

Key presses, resizes, timer ticks and poll results all become events on
``Dashboard.events``. Only the coordinator thread takes events off the queue
and applies them with ``state.update``; the poller's worker thread only ever
calls ``Dashboard.post``.
"""
import curses
import queue
import time

from .debuglog import debug_log
from .keys import translate_key
from .poller import POLL_INTERVAL, Poller
from .render import render_frame
from .state import Action, DashboardState, KeyEvent, PollFailedEvent, ResizeEvent, TickEvent, update
from .theme import Palette, paint

# getch timeout; also bounds how late a tick can be noticed
INPUT_TIMEOUT_MS = 100


def wall_clock():
    return time.strftime("%H:%M:%S")


class Dashboard:
    def __init__(self, acquisition, theme, interval=POLL_INTERVAL,
                 clock=time.monotonic, wall=wall_clock):
        self.events = queue.Queue()
        self.state = DashboardState()
        self.theme = theme
        self.interval = interval
        self.poller = Poller(acquisition, self.post)
        self._clock = clock
        self._wall = wall
        self._next_tick = None

    def post(self, event):
        """Hand an event to the coordinator. Safe to call from any thread."""
        self.events.put(event)

    def dispatch(self, event):
        """Apply one event. Returns False once the dashboard should stop."""
        self.state = update(self.state, event)
        if isinstance(event, TickEvent):
            self.poller.trigger()
        elif isinstance(event, KeyEvent) and event.action is Action.REFRESH:
            debug_log("APP: refresh requested")
            self.poller.trigger()
        elif isinstance(event, PollFailedEvent):
            debug_log(f"APP: keeping last snapshot, pass failed: {event.error}")
        return not self.state.quit

    def pump(self):
        """Dispatch everything queued so far, in arrival order.

        Returns ``(running, processed)``.
        """
        processed = 0
        while True:
            try:
                event = self.events.get_nowait()
            except queue.Empty:
                return True, processed
            processed += 1
            if not self.dispatch(event):
                return False, processed

    def schedule_ticks(self):
        """Post a TickEvent on the first call and then once per interval."""
        now = self._clock()
        if self._next_tick is None or now >= self._next_tick:
            self.post(TickEvent())
            self._next_tick = now + self.interval
            return True
        return False

    def frame(self, now=None):
        if now is None:
            now = self._wall()
        return render_frame(self.state, now)

    def read_input(self, stdscr):
        k = stdscr.getch()
        if k == -1:
            return
        if k == curses.KEY_RESIZE:
            h, w = stdscr.getmaxyx()
            self.post(ResizeEvent(w, h))
            return
        action = translate_key(k)
        if action is not None:
            self.post(KeyEvent(action))

    def run(self, stdscr):
        try:
            curses.curs_set(0)
        except curses.error:
            pass
        stdscr.keypad(True)
        stdscr.timeout(INPUT_TIMEOUT_MS)
        palette = Palette(self.theme).setup()

        h, w = stdscr.getmaxyx()
        self.post(ResizeEvent(w, h))
        debug_log(f"APP: started {w}x{h}, interval {self.interval}s, theme {self.theme.name}")

        last_wall = None
        try:
            while True:
                self.schedule_ticks()
                running, processed = self.pump()
                if not running:
                    break
                now = self._wall()
                if processed or now != last_wall:
                    paint(stdscr, self.frame(now), palette)
                    last_wall = now
                self.read_input(stdscr)
        finally:
            self.poller.shutdown()
        debug_log(f"APP: quit after {self.poller.started} passes ({self.poller.skipped} skipped)")
