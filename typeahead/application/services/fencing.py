"""Round fencing token: identifies the one round allowed to write state."""


class RoundFence:
    """Monotonic counter of search rounds.

    begin_round() makes a new round current; is_current() must be checked at
    the moment of the intended write, since currency can change while a
    round's queries are still outstanding. invalidate() retires the current
    round without starting a new one (used on clear, escape, select, teardown).
    """

    def __init__(self) -> None:
        self._current = 0

    @property
    def current(self) -> int:
        return self._current

    def begin_round(self) -> int:
        self._current += 1
        return self._current

    def is_current(self, round_id: int) -> bool:
        return round_id == self._current

    def invalidate(self) -> None:
        self._current += 1
