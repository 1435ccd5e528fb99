"""A first-fit, address-ordered free-list allocator over a growable heap."""

from bisect import bisect_left, insort

from .mmu import KERNBASE

HEADER_SIZE = 8  # bytes in a block header; also the allocation unit
MIN_GROWTH = 4096  # fewest units requested from sbrk at a time

_BASE = -1  # the zero-sized sentinel, below every heap address


class Heap:
    """A simulated user heap: sbrk-grown memory carved up by malloc and free."""

    def __init__(self, limit=KERNBASE):
        self.limit = limit
        self.brk = 0
        self._free = {}  # unit address -> size in units
        self._order = []  # sorted unit addresses of free blocks
        self._freep = None
        self._allocated = {}  # unit address of header -> size in units

    def sbrk(self, n):
        """Move the break by n bytes and return the old break."""
        new = self.brk + n
        if new < 0:
            raise ValueError("sbrk below start of heap")
        if new >= self.limit:
            raise MemoryError("sbrk beyond address space limit")
        old, self.brk = self.brk, new
        return old

    def _next(self, addr):
        index = bisect_left(self._order, addr)
        return self._order[(index + 1) % len(self._order)]

    def _remove(self, addr):
        del self._free[addr]
        self._order.pop(bisect_left(self._order, addr))

    def _insert(self, addr, units):
        self._free[addr] = units
        insort(self._order, addr)

    def _morecore(self, nunits):
        nunits = max(nunits, MIN_GROWTH)
        start = self.sbrk(nunits * HEADER_SIZE)
        unit = start // HEADER_SIZE
        self._allocated[unit] = nunits
        self.free((unit + 1) * HEADER_SIZE)

    def malloc(self, nbytes):
        """Allocate nbytes and return the address of the usable memory."""
        if nbytes < 0:
            raise ValueError("negative allocation size")
        nunits = (nbytes + HEADER_SIZE - 1) // HEADER_SIZE + 1
        if self._freep is None:
            self._insert(_BASE, 0)
            self._freep = _BASE
        prev = self._freep
        while True:
            p = self._next(prev)
            size = self._free[p]
            if size >= nunits:
                if size == nunits:
                    self._remove(p)
                    block = p
                else:
                    self._free[p] = size - nunits
                    block = p + size - nunits
                self._allocated[block] = nunits
                self._freep = prev
                return (block + 1) * HEADER_SIZE
            if p == self._freep:
                self._morecore(nunits)
                p = self._freep
            prev = p

    def free(self, addr):
        """Return a block obtained from malloc to the free list."""
        if addr % HEADER_SIZE:
            raise ValueError(f"address {addr:#x} was not returned by malloc")
        bp = addr // HEADER_SIZE - 1
        units = self._allocated.pop(bp, None)
        if units is None:
            raise ValueError(f"address {addr:#x} is not allocated")
        index = bisect_left(self._order, bp)
        p = self._order[index - 1]
        following = self._order[index % len(self._order)]
        if bp + units == following:
            units += self._free[following]
            self._remove(following)
        if p + self._free[p] == bp:
            self._free[p] += units
        else:
            self._insert(bp, units)
        self._freep = p

    def free_blocks(self):
        """The free blocks as (address, size) pairs in bytes, by address."""
        return [
            (addr * HEADER_SIZE, self._free[addr] * HEADER_SIZE)
            for addr in self._order
            if addr != _BASE
        ]