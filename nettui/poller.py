import threading

from .debuglog import debug_log
from .normalize import normalize
from .state import DataEvent, PollFailedEvent

# ═══════════════════════════════════════════════════════════════
# 📡 POLLER — runs acquisition passes off the UI thread
# ═══════════════════════════════════════════════════════════════
POLL_INTERVAL = 2.0


class Poller:
    """Runs one normalization pass at a time on a background thread.

    ``trigger()`` starts a pass unless one is still running, in which case the
    trigger is skipped (not queued) and False is returned. Each finished pass
    hands exactly one event to ``deliver``: a ``DataEvent`` on success or a
    ``PollFailedEvent`` if the pass raised. There is no timeout: a pass that
    hangs keeps the poller busy and every later trigger is skipped until it
    returns. After ``shutdown()`` no new pass is started.
    """

    def __init__(self, acquisition, deliver, normalizer=normalize):
        self.acquisition = acquisition
        self.deliver = deliver
        self._normalize = normalizer
        self._worker = None
        self._closed = False
        self.started = 0
        self.skipped = 0

    @property
    def busy(self):
        return self._worker is not None and self._worker.is_alive()

    @property
    def closed(self):
        return self._closed

    def trigger(self):
        if self._closed:
            debug_log("POLLER: trigger after shutdown ignored")
            return False
        if self.busy:
            self.skipped += 1
            debug_log("POLLER: previous pass still running, trigger skipped")
            return False
        self.started += 1
        # daemon so a hung host query can't keep the process alive after quit
        self._worker = threading.Thread(
            target=self._run_pass, name=f"poller-{self.started}", daemon=True
        )
        self._worker.start()
        return True

    def wait(self, timeout=None):
        """Block until the current pass (if any) finishes. Returns False on timeout."""
        worker = self._worker
        if worker is None:
            return True
        worker.join(timeout)
        return not worker.is_alive()

    def shutdown(self, timeout=0):
        """Stop accepting triggers and give a running pass ``timeout`` seconds.

        Returns True when no pass is left running. A pass still running is
        abandoned; its thread is a daemon and dies with the process.
        """
        self._closed = True
        done = self.wait(timeout)
        if not done:
            debug_log("POLLER: shutdown with a pass still running, abandoning it")
        return done

    def _run_pass(self):
        try:
            snapshot = self._normalize(self.acquisition)
        except Exception as e:
            debug_log(f"POLLER: pass failed: {e!r}")
            self.deliver(PollFailedEvent(repr(e)))
            return
        self.deliver(DataEvent(snapshot))
