"""Process table snapshots and the ps report."""

from dataclasses import dataclass
from enum import Enum

from .constants import NPROC

HEADER = "PID\tTKTS\tTCKS\tSTAT\tNAME\n"


class ProcState(str, Enum):
    """One-letter process states as reported by getpinfo."""

    EMBRYO = "E"
    RUNNING = "R"
    RUNNABLE = "A"
    SLEEPING = "S"
    ZOMBIE = "Z"


@dataclass
class ProcInfo:
    """One slot of the process table."""

    inuse: bool = False
    tickets: int = 0
    pid: int = 0
    ticks: int = 0
    name: str = ""
    state: ProcState = ProcState.EMBRYO


def format_ps(table):
    """The ps report for a process table: a header and one line per slot in use."""
    slots = list(table)
    if len(slots) > NPROC:
        raise ValueError(f"process table holds at most {NPROC} slots")
    rows = [
        f"{p.pid}\t{p.tickets}\t{p.ticks}\t{ProcState(p.state).value}\t{p.name}\n"
        for p in slots
        if p.inuse
    ]
    return HEADER + "".join(rows)