from abc import ABC, abstractmethod
from datetime import datetime, timezone


class Timebase(ABC):
    @abstractmethod
    def now(self) -> float:
        """Current time in seconds since the UNIX epoch."""
        pass

    def epoch_millis(self) -> int:
        return int(round(self.now() * 1000))

    def reset(self):
        pass

    def set(self, val: float):
        pass


class WallClock(Timebase):
    def now(self) -> float:
        return datetime.now().timestamp()


class UTCClock(Timebase):
    def now(self) -> float:
        return datetime.now(timezone.utc).timestamp()


class DictatedClock(Timebase):
    def __init__(self, initial: float = 0.0):
        super().__init__()
        self.value = initial
        self._initial = initial

    def now(self) -> float:
        return self.value

    def reset(self):
        self.value = self._initial

    def set(self, val: float):
        self.value = val

    def advance(self, delta: float):
        self.value += delta
