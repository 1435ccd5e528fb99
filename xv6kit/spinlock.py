"""Spin locks with nested interrupt disabling, and sleeping locks."""

import threading
import traceback
from dataclasses import dataclass

_NPCS = 10


class LockError(RuntimeError):
    """Raised when a lock or the interrupt nesting is used incorrectly."""


@dataclass(eq=False)
class Cpu:
    """The per-CPU state that locking touches."""

    id: int = 0
    ncli: int = 0
    intena: bool = False
    interrupts: bool = True

    def push_cli(self):
        """Disable interrupts, remembering whether they were on at the outermost level."""
        enabled = self.interrupts
        self.interrupts = False
        if self.ncli == 0:
            self.intena = enabled
        self.ncli += 1

    def pop_cli(self):
        """Undo one push_cli; interrupts come back on after the last one if they were on."""
        if self.interrupts:
            raise LockError("popcli - interruptible")
        if self.ncli <= 0:
            raise LockError("popcli")
        self.ncli -= 1
        if self.ncli == 0 and self.intena:
            self.interrupts = True


def _caller_pcs():
    frames = traceback.extract_stack()[:-2]
    return tuple(frame.name for frame in reversed(frames[-_NPCS:]))


class SpinLock:
    """A mutual exclusion lock held by one CPU with its interrupts off."""

    def __init__(self, name="lock"):
        self.name = name
        self.cpu = None
        self.pcs = ()
        self._mutex = threading.Lock()

    @property
    def locked(self):
        return self._mutex.locked()

    def holding(self, cpu):
        """Whether cpu holds this lock."""
        cpu.push_cli()
        try:
            return self._mutex.locked() and self.cpu is cpu
        finally:
            cpu.pop_cli()

    def acquire(self, cpu):
        """Take the lock on behalf of cpu, waiting while another CPU holds it."""
        cpu.push_cli()
        if self.holding(cpu):
            cpu.pop_cli()
            raise LockError("acquire")
        self._mutex.acquire()
        self.cpu = cpu
        self.pcs = _caller_pcs()

    def release(self, cpu):
        """Release the lock, which cpu must hold."""
        if not self.holding(cpu):
            raise LockError("release")
        self.pcs = ()
        self.cpu = None
        self._mutex.release()
        cpu.pop_cli()


class SleepLock:
    """A long-term lock: waiters sleep until the holder releases it."""

    def __init__(self, name="sleep lock"):
        self.name = name
        self.locked = False
        self.pid = 0
        self._cond = threading.Condition()

    def acquire(self, pid):
        """Take the lock for process pid, sleeping while it is held."""
        with self._cond:
            while self.locked:
                self._cond.wait()
            self.locked = True
            self.pid = pid

    def release(self):
        """Release the lock and wake every sleeper."""
        with self._cond:
            self.locked = False
            self.pid = 0
            self._cond.notify_all()

    def holding(self, pid):
        """Whether process pid holds the lock."""
        with self._cond:
            return self.locked and self.pid == pid