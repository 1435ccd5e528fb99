"""Models of a small teaching Unix kernel's core pieces and its user-space helpers."""

__version__ = "0.1.0"

__all__ = [
    "constants",
    "mmu",
    "cstring",
    "wc",
    "elf",
    "shell",
    "umalloc",
    "spinlock",
    "vm",
    "syscall",
    "pstat",
]