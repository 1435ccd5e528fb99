"""System call argument fetching and dispatch for a process's memory image."""

import sys
from dataclasses import dataclass, field

from .constants import Syscall
from .mmu import MASK32

MIN_TICKETS = 10
DEFAULT_TICKETS = 10


class SyscallError(Exception):
    """Raised when a system call's arguments are invalid; the call returns -1."""


@dataclass(eq=False)
class Process:
    """The parts of a process a system call reads and writes."""

    pid: int
    name: str = ""
    memory: bytearray = field(default_factory=bytearray)
    esp: int = 0
    eax: int = 0
    tickets: int = DEFAULT_TICKETS
    killed: bool = False

    @property
    def sz(self):
        return len(self.memory)


def fetchint(proc, addr):
    """The 32-bit signed integer at addr in the process's memory."""
    if addr < 0 or addr >= proc.sz or addr + 4 > proc.sz:
        raise SyscallError(f"bad address {addr:#x}")
    return int.from_bytes(proc.memory[addr:addr + 4], "little", signed=True)


def fetchstr(proc, addr):
    """The NUL-terminated string at addr, without its NUL."""
    if addr < 0 or addr >= proc.sz:
        raise SyscallError(f"bad address {addr:#x}")
    end = proc.memory.find(0, addr)
    if end < 0:
        raise SyscallError("unterminated string")
    return bytes(proc.memory[addr:end])


def argint(proc, n):
    """The nth 32-bit system call argument."""
    return fetchint(proc, (proc.esp + 4 + 4 * n) & MASK32)


def argptr(proc, n, size):
    """The nth argument as the address of a size-byte block inside the process."""
    addr = argint(proc, n) & MASK32
    if size < 0 or addr >= proc.sz or addr + size > proc.sz:
        raise SyscallError("pointer outside process memory")
    return addr


def argstr(proc, n):
    """The nth argument as a NUL-terminated string."""
    return fetchstr(proc, argint(proc, n) & MASK32)


def settickets(proc, number):
    """Give the process number lottery tickets; fewer than the minimum is refused."""
    if number < MIN_TICKETS:
        raise SyscallError(f"at least {MIN_TICKETS} tickets required")
    proc.tickets = number
    return 0


def _sys_getpid(proc):
    return proc.pid


def _sys_settickets(proc):
    return settickets(proc, argint(proc, 0))


class SyscallTable:
    """Maps system call numbers to handlers and runs them for a process."""

    def __init__(self, handlers=None):
        self._handlers = {
            int(Syscall.GETPID): _sys_getpid,
            int(Syscall.SETTICKETS): _sys_settickets,
        }
        self._handlers.update({int(num): fn for num, fn in (handlers or {}).items()})

    def dispatch(self, proc):
        """Run the call numbered in proc.eax and store its result back in proc.eax."""
        num = proc.eax
        handler = self._handlers.get(num) if num > 0 else None
        if handler is None:
            print(f"{proc.pid} {proc.name}: unknown sys call {num}")
            proc.eax = -1
            return proc.eax
        try:
            proc.eax = handler(proc)
        except SyscallError:
            proc.eax = -1
        return proc.eax