import threading
import time


class MonotonicIdGenerator:
    """
    Time-derived string ids, strictly increasing within the process.

    The numeric part is microseconds since the epoch; when the clock has not
    advanced (or went backwards) the previous value is bumped by one, so rapid
    sequential calls never collide and ids sort lexicographically in creation
    order.
    """

    def __init__(self, prefix, clock=None):
        self.prefix = prefix
        self._clock = clock or time.time_ns
        self._last = 0
        self._lock = threading.Lock()

    def __call__(self):
        with self._lock:
            value = self._clock() // 1000
            if value <= self._last:
                value = self._last + 1
            self._last = value
        return f'{self.prefix}{value}'


payment_ids = MonotonicIdGenerator('P')
expense_ids = MonotonicIdGenerator('E')
fee_structure_ids = MonotonicIdGenerator('F_')
trash_ids = MonotonicIdGenerator('T_')
