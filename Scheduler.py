import heapq
import itertools


class TkScheduler:
    """Відкладені виклики через цикл подій Tk (widget.after / after_cancel)."""

    def __init__(self, widget):
        self.widget = widget

    def call_later(self, delay_seconds, callback):
        return self.widget.after(int(round(delay_seconds * 1000)), callback)

    def cancel(self, handle):
        if handle is not None:
            self.widget.after_cancel(handle)


class ManualScheduler:
    """
    Планувальник з віртуальним годинником: час іде лише через advance().
    Для консольного режиму і тестів.
    """

    def __init__(self):
        self.now = 0.0
        self._queue = []
        self._cancelled = set()
        self._ids = itertools.count(1)

    def call_later(self, delay_seconds, callback):
        handle = next(self._ids)
        heapq.heappush(self._queue, (self.now + max(0.0, delay_seconds), handle, callback))
        return handle

    def cancel(self, handle):
        self._cancelled.add(handle)

    @property
    def pending(self):
        return sum(1 for _, h, _ in self._queue if h not in self._cancelled)

    def advance(self, seconds):
        """Зсуває годинник і виконує все, чий час настав. Повертає кількість викликів."""
        self.now += seconds
        fired = 0
        while self._queue and self._queue[0][0] <= self.now:
            _, handle, callback = heapq.heappop(self._queue)
            if handle in self._cancelled:
                self._cancelled.discard(handle)
                continue
            callback()
            fired += 1
        return fired
