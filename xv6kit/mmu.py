"""x86 memory-management definitions: address layout, paging and descriptors."""

import struct
from dataclasses import dataclass, fields

MASK32 = 0xFFFFFFFF

# Physical and virtual memory layout.
EXTMEM = 0x100000  # start of extended memory
PHYSTOP = 0xE000000  # top physical memory
DEVSPACE = 0xFE000000  # other devices are at high addresses
KERNBASE = 0x80000000  # first kernel virtual address
KERNLINK = KERNBASE + EXTMEM  # address where kernel is linked

# Eflags and control register bits.
FL_IF = 0x00000200
CR0_PE = 0x00000001
CR0_WP = 0x00010000
CR0_PG = 0x80000000
CR4_PSE = 0x00000010

# Segment selectors.
SEG_KCODE = 1
SEG_KDATA = 2
SEG_UCODE = 3
SEG_UDATA = 4
SEG_TSS = 5
NSEGS = 6

DPL_USER = 0x3

# Application segment type bits.
STA_X = 0x8
STA_W = 0x2
STA_R = 0x2

# System segment type bits.
STS_T32A = 0x9
STS_IG32 = 0xE
STS_TG32 = 0xF

# Paging.
NPDENTRIES = 1024
NPTENTRIES = 1024
PGSIZE = 4096
PTXSHIFT = 12
PDXSHIFT = 22

PTE_P = 0x001
PTE_W = 0x002
PTE_U = 0x004
PTE_PS = 0x080

SEG_NULLASM = bytes(8)


def pdx(va):
    """Page directory index of a virtual address."""
    return ((va & MASK32) >> PDXSHIFT) & 0x3FF


def ptx(va):
    """Page table index of a virtual address."""
    return ((va & MASK32) >> PTXSHIFT) & 0x3FF


def pgaddr(d, t, o):
    """Build a virtual address from directory index, table index and offset."""
    return (d << PDXSHIFT | t << PTXSHIFT | o) & MASK32


def pgroundup(sz):
    """Round up to a page boundary, wrapping at 32 bits."""
    return (sz + PGSIZE - 1) & ~(PGSIZE - 1) & MASK32


def pgrounddown(a):
    """Round down to a page boundary."""
    return a & ~(PGSIZE - 1) & MASK32


def pte_addr(pte):
    """Physical address held in a page table entry."""
    return pte & ~0xFFF & MASK32


def pte_flags(pte):
    """Flag bits of a page table entry."""
    return pte & 0xFFF


def v2p(a):
    """Kernel virtual address to physical address."""
    return (a - KERNBASE) & MASK32


def p2v(a):
    """Physical address to kernel virtual address."""
    return (a + KERNBASE) & MASK32


def _check_widths(obj, layout):
    for name, width in layout:
        value = getattr(obj, name)
        if not 0 <= value < (1 << width):
            raise ValueError(f"{name}={value} does not fit in {width} bits")


def _pack(obj, layout):
    value = 0
    shift = 0
    for name, width in layout:
        value |= getattr(obj, name) << shift
        shift += width
    return value.to_bytes(8, "little")


def _unpack(layout, data):
    if len(data) != 8:
        raise ValueError(f"descriptor must be 8 bytes, got {len(data)}")
    value = int.from_bytes(data, "little")
    values = {}
    for name, width in layout:
        values[name] = value & ((1 << width) - 1)
        value >>= width
    return values


_SEG_LAYOUT = (
    ("lim_15_0", 16),
    ("base_15_0", 16),
    ("base_23_16", 8),
    ("type", 4),
    ("s", 1),
    ("dpl", 2),
    ("p", 1),
    ("lim_19_16", 4),
    ("avl", 1),
    ("rsv1", 1),
    ("db", 1),
    ("g", 1),
    ("base_31_24", 8),
)

_GATE_LAYOUT = (
    ("off_15_0", 16),
    ("cs", 16),
    ("args", 5),
    ("rsv1", 3),
    ("type", 4),
    ("s", 1),
    ("dpl", 2),
    ("p", 1),
    ("off_31_16", 16),
)


@dataclass(frozen=True)
class SegmentDescriptor:
    """An 8-byte x86 segment descriptor."""

    lim_15_0: int = 0
    base_15_0: int = 0
    base_23_16: int = 0
    type: int = 0
    s: int = 0
    dpl: int = 0
    p: int = 0
    lim_19_16: int = 0
    avl: int = 0
    rsv1: int = 0
    db: int = 0
    g: int = 0
    base_31_24: int = 0

    def __post_init__(self):
        _check_widths(self, _SEG_LAYOUT)

    def to_bytes(self):
        """Encode as the 8 bytes the processor reads."""
        return _pack(self, _SEG_LAYOUT)

    @classmethod
    def from_bytes(cls, data):
        """Decode 8 bytes into a descriptor."""
        return cls(**_unpack(_SEG_LAYOUT, bytes(data)))

    @property
    def base(self):
        return self.base_15_0 | self.base_23_16 << 16 | self.base_31_24 << 24


@dataclass(frozen=True)
class GateDescriptor:
    """An 8-byte x86 interrupt or trap gate descriptor."""

    off_15_0: int = 0
    cs: int = 0
    args: int = 0
    rsv1: int = 0
    type: int = 0
    s: int = 0
    dpl: int = 0
    p: int = 0
    off_31_16: int = 0

    def __post_init__(self):
        _check_widths(self, _GATE_LAYOUT)

    def to_bytes(self):
        """Encode as the 8 bytes the processor reads."""
        return _pack(self, _GATE_LAYOUT)

    @classmethod
    def from_bytes(cls, data):
        """Decode 8 bytes into a gate descriptor."""
        return cls(**_unpack(_GATE_LAYOUT, bytes(data)))

    @property
    def offset(self):
        return self.off_15_0 | self.off_31_16 << 16


def seg(type_, base, limit, dpl):
    """A normal 32-bit segment with 4 KiB granularity."""
    base &= MASK32
    limit &= MASK32
    return SegmentDescriptor(
        lim_15_0=(limit >> 12) & 0xFFFF,
        base_15_0=base & 0xFFFF,
        base_23_16=(base >> 16) & 0xFF,
        type=type_ & 0xF,
        s=1,
        dpl=dpl & 0x3,
        p=1,
        lim_19_16=(limit >> 28) & 0xF,
        avl=0,
        rsv1=0,
        db=1,
        g=1,
        base_31_24=(base >> 24) & 0xFF,
    )


def seg16(type_, base, limit, dpl):
    """A segment with byte granularity, as used for the task state segment."""
    base &= MASK32
    limit &= MASK32
    return SegmentDescriptor(
        lim_15_0=limit & 0xFFFF,
        base_15_0=base & 0xFFFF,
        base_23_16=(base >> 16) & 0xFF,
        type=type_ & 0xF,
        s=1,
        dpl=dpl & 0x3,
        p=1,
        lim_19_16=(limit >> 16) & 0xF,
        avl=0,
        rsv1=0,
        db=1,
        g=0,
        base_31_24=(base >> 24) & 0xFF,
    )


def seg_asm(type_, base, limit):
    """The 8 bytes a boot-time GDT entry is assembled into."""
    base &= MASK32
    limit &= MASK32
    return struct.pack(
        "<HHBBBB",
        (limit >> 12) & 0xFFFF,
        base & 0xFFFF,
        (base >> 16) & 0xFF,
        0x90 | (type_ & 0xF),
        0xC0 | ((limit >> 28) & 0xF),
        (base >> 24) & 0xFF,
    )


def set_gate(istrap, sel, off, dpl):
    """An interrupt gate, or a trap gate when istrap is true."""
    off &= MASK32
    return GateDescriptor(
        off_15_0=off & 0xFFFF,
        cs=sel,
        args=0,
        rsv1=0,
        type=STS_TG32 if istrap else STS_IG32,
        s=0,
        dpl=dpl,
        p=1,
        off_31_16=off >> 16,
    )


__all__ = [f.name for f in fields(SegmentDescriptor)][:0] + [
    "GateDescriptor",
    "SegmentDescriptor",
    "pdx",
    "ptx",
    "pgaddr",
    "pgroundup",
    "pgrounddown",
    "pte_addr",
    "pte_flags",
    "v2p",
    "p2v",
    "seg",
    "seg16",
    "seg_asm",
    "set_gate",
]