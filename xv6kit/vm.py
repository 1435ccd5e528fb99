"""Two-level x86 page tables kept in a simulated physical memory."""

from .mmu import (
    KERNBASE,
    MASK32,
    NPDENTRIES,
    PGSIZE,
    PTE_P,
    PTE_U,
    PTE_W,
    pdx,
    pgaddr,
    pgrounddown,
    pgroundup,
    pte_addr,
    pte_flags,
    ptx,
)

_ENTRY_SIZE = 4


class VmError(RuntimeError):
    """Raised when page tables or physical pages are used inconsistently."""


class PhysicalMemory:
    """A pool of page frames; physical address 0 is never handed out."""

    def __init__(self, npages):
        if npages <= 0:
            raise ValueError("physical memory needs at least one page")
        self.base = PGSIZE
        self.top = PGSIZE * (npages + 1)
        self._data = bytearray(npages * PGSIZE)
        # Kept so that the lowest free frame is handed out first.
        self._free = list(range(self.top - PGSIZE, self.base - 1, -PGSIZE))
        self._free_set = set(self._free)

    def alloc_page(self):
        """Take a free page frame and return its address, or None if none is left."""
        if not self._free:
            return None
        pa = self._free.pop()
        self._free_set.discard(pa)
        return pa

    def free_page(self, pa):
        """Return a page frame to the pool."""
        if pa % PGSIZE or not self.base <= pa < self.top:
            raise VmError("kfree")
        if pa in self._free_set:
            raise VmError("kfree: page already free")
        self._free.append(pa)
        self._free_set.add(pa)

    def _check(self, pa, n):
        if n < 0 or pa < self.base or pa + n > self.top:
            raise VmError(f"physical access {pa:#x}+{n} outside memory")
        return pa - self.base

    def read(self, pa, n):
        """Read n bytes at physical address pa."""
        start = self._check(pa, n)
        return bytes(self._data[start:start + n])

    def write(self, pa, data):
        """Write data at physical address pa."""
        data = bytes(data)
        start = self._check(pa, len(data))
        self._data[start:start + len(data)] = data

    def free_count(self):
        """Number of page frames not in use."""
        return len(self._free)


class PageDirectory:
    """A process page directory covering the user part of the address space."""

    def __init__(self, memory):
        self.memory = memory
        pgdir = memory.alloc_page()
        if pgdir is None:
            raise MemoryError("no page for page directory")
        memory.write(pgdir, bytes(PGSIZE))
        self.pgdir = pgdir

    def _load(self, addr):
        return int.from_bytes(self.memory.read(addr, _ENTRY_SIZE), "little")

    def _store(self, addr, value):
        self.memory.write(addr, (value & MASK32).to_bytes(_ENTRY_SIZE, "little"))

    def _directory(self):
        if self.pgdir is None:
            raise VmError("page directory has been freed")
        return self.pgdir

    def walk(self, va, alloc=False):
        """Physical address of the PTE for va, creating its page table if alloc."""
        pde_addr = self._directory() + _ENTRY_SIZE * pdx(va)
        pde = self._load(pde_addr)
        if pde & PTE_P:
            pgtab = pte_addr(pde)
        else:
            if not alloc:
                return None
            pgtab = self.memory.alloc_page()
            if pgtab is None:
                return None
            self.memory.write(pgtab, bytes(PGSIZE))
            self._store(pde_addr, pgtab | PTE_P | PTE_W | PTE_U)
        return pgtab + _ENTRY_SIZE * ptx(va)

    def map_pages(self, va, size, pa, perm):
        """Map the pages covering [va, va+size) to consecutive frames from pa."""
        a = pgrounddown(va)
        last = pgrounddown(va + size - 1)
        while True:
            pte = self.walk(a, True)
            if pte is None:
                raise MemoryError("no page for page table")
            if self._load(pte) & PTE_P:
                raise VmError("remap")
            self._store(pte, pa | perm | PTE_P)
            if a == last:
                break
            a += PGSIZE
            pa += PGSIZE

    def init_uvm(self, code):
        """Load code, smaller than a page, at user address 0."""
        code = bytes(code)
        if len(code) >= PGSIZE:
            raise VmError("inituvm: more than a page")
        mem = self.memory.alloc_page()
        if mem is None:
            raise MemoryError("no page for initial code")
        self.memory.write(mem, bytes(PGSIZE))
        self.map_pages(0, PGSIZE, mem, PTE_W | PTE_U)
        self.memory.write(mem, code)

    def alloc_uvm(self, oldsz, newsz):
        """Grow user memory from oldsz to newsz bytes and return the new size."""
        if newsz >= KERNBASE:
            raise MemoryError("allocuvm: size reaches kernel space")
        if newsz < oldsz:
            return oldsz
        for a in range(pgroundup(oldsz), newsz, PGSIZE):
            mem = self.memory.alloc_page()
            if mem is None:
                self.dealloc_uvm(newsz, oldsz)
                raise MemoryError("allocuvm out of memory")
            self.memory.write(mem, bytes(PGSIZE))
            try:
                self.map_pages(a, PGSIZE, mem, PTE_W | PTE_U)
            except MemoryError:
                self.dealloc_uvm(newsz, oldsz)
                self.memory.free_page(mem)
                raise MemoryError("allocuvm out of memory (2)") from None
        return newsz

    def dealloc_uvm(self, oldsz, newsz):
        """Shrink user memory from oldsz to newsz bytes and return the new size."""
        if newsz >= oldsz:
            return oldsz
        a = pgroundup(newsz)
        while a < oldsz:
            pte = self.walk(a)
            if pte is None:
                a = (pgaddr(pdx(a) + 1, 0, 0) - PGSIZE) & MASK32
            else:
                entry = self._load(pte)
                if entry & PTE_P:
                    pa = pte_addr(entry)
                    if pa == 0:
                        raise VmError("kfree")
                    self.memory.free_page(pa)
                    self._store(pte, 0)
            a = (a + PGSIZE) & MASK32
            if a == 0:
                break
        return newsz

    def copy(self, sz):
        """A new page directory holding a copy of the first sz bytes of user memory."""
        child = PageDirectory(self.memory)
        try:
            for va in range(0, sz, PGSIZE):
                pte = self.walk(va)
                if pte is None:
                    raise VmError("copyuvm: pte should exist")
                entry = self._load(pte)
                if not entry & PTE_P:
                    raise VmError("copyuvm: page not present")
                mem = self.memory.alloc_page()
                if mem is None:
                    raise MemoryError("copyuvm out of memory")
                self.memory.write(mem, self.memory.read(pte_addr(entry), PGSIZE))
                try:
                    child.map_pages(va, PGSIZE, mem, pte_flags(entry))
                except MemoryError:
                    self.memory.free_page(mem)
                    raise
        except (VmError, MemoryError):
            child.free()
            raise
        return child

    def uva2ka(self, uva):
        """Physical frame backing a user page, or None if absent or not user-accessible."""
        pte = self.walk(uva)
        if pte is None:
            return None
        entry = self._load(pte)
        if not entry & PTE_P or not entry & PTE_U:
            return None
        return pte_addr(entry)

    def copyout(self, va, data):
        """Copy data into user memory starting at va."""
        data = bytes(data)
        pos = 0
        while pos < len(data):
            va0 = pgrounddown(va)
            pa0 = self.uva2ka(va0)
            if pa0 is None:
                raise VmError(f"copyout: {va:#x} is not user memory")
            n = min(PGSIZE - (va - va0), len(data) - pos)
            self.memory.write(pa0 + (va - va0), data[pos:pos + n])
            pos += n
            va = va0 + PGSIZE

    def clear_pteu(self, uva):
        """Make a page inaccessible to user code, as for a stack guard page."""
        pte = self.walk(uva)
        if pte is None:
            raise VmError("clearpteu")
        self._store(pte, self._load(pte) & ~PTE_U)

    def free(self):
        """Release all user pages, the page tables and the directory itself."""
        if self.pgdir is None:
            raise VmError("freevm: no pgdir")
        self.dealloc_uvm(KERNBASE, 0)
        for index in range(NPDENTRIES):
            pde = self._load(self.pgdir + _ENTRY_SIZE * index)
            if pde & PTE_P:
                self.memory.free_page(pte_addr(pde))
        self.memory.free_page(self.pgdir)
        self.pgdir = None