# xv6kit

Python models of the core pieces of a small teaching Unix kernel and its
user space. Each module stands alone and can be used to explore, test or
teach how those pieces behave.

## What is inside

| Module | What it does |
| --- | --- |
| `xv6kit.constants` | Kernel parameters (`NPROC`, `NOFILE`, `MAXARG`, ...), system-call numbers (`Syscall`), trap and IRQ numbers (`Trap`, `Irq`), open flags (`OpenFlag`), inode types (`FileType`) and `open_access()`, which gives the `(readable, writable)` pair for an open mode |
| `xv6kit.mmu` | Address arithmetic (`pdx`, `ptx`, `pgaddr`, `pgroundup`, `pgrounddown`, `pte_addr`, `pte_flags`, `v2p`, `p2v`), the memory-layout and paging constants, and x86 descriptors: `SegmentDescriptor` and `GateDescriptor` with `to_bytes()` / `from_bytes()`, built by `seg`, `seg16` and `set_gate`; `seg_asm` gives the 8 bytes of a boot-time GDT entry |
| `xv6kit.cstring` | C string and memory routines on bytes: `memcmp`, `memmove`, `strncmp`, `strncpy`, `safestrcpy`, `strlen`, `strcmp`, `strchr`, `atoi`, `gets` |
| `xv6kit.wc` | Line, word and byte counting (`count()` returning `Counts`), with a command-line front end |
| `xv6kit.elf` | Parsing and packing of 32-bit little-endian ELF file headers (`ElfHeader`) and program headers (`ProgramHeader`); bad input raises `ElfFormatError` |
| `xv6kit.shell` | The shell's tokenizer (`tokenize()`) and parser (`parse_command()`), producing `ExecCmd`, `RedirCmd`, `PipeCmd`, `ListCmd` and `BackCmd` trees |
| `xv6kit.umalloc` | A first-fit, address-ordered free-list allocator over an `sbrk`-grown `Heap` |
| `xv6kit.spinlock` | `SpinLock`, `SleepLock` and per-CPU interrupt nesting (`Cpu.push_cli` / `Cpu.pop_cli`) |
| `xv6kit.vm` | Two-level page tables (`PageDirectory`) over simulated `PhysicalMemory` |
| `xv6kit.syscall` | Fetching system-call arguments from a `Process` (`fetchint`, `fetchstr`, `argint`, `argptr`, `argstr`), `settickets`, and dispatch through a `SyscallTable` |
| `xv6kit.pstat` | Process-table snapshots (`ProcInfo`, `ProcState`) and the `format_ps()` listing |

Nothing outside the standard library is needed.

## Installing

```
pip install .
```

## Examples

Parse a shell command line into a command tree:

```python
from xv6kit.shell import parse_command, PipeCmd

cmd = parse_command("cat README | grep the > out\n")
assert isinstance(cmd, PipeCmd)
```

Malformed input, such as a redirection with no file name or more than
nine arguments to one command, raises `ShellSyntaxError`.

Count lines, words and bytes of a stream:

```python
import io
from xv6kit.wc import count

counts = count(io.BytesIO(b"hello world\n"))
print(counts.format("greeting"))   # 1 2 12 greeting
```

Allocate and release memory from a simulated heap:

```python
from xv6kit.umalloc import Heap

heap = Heap(1 << 20)
addr = heap.malloc(100)
heap.free(addr)
print(heap.free_blocks())
```

Build a page table and copy data into user memory:

```python
from xv6kit.vm import PhysicalMemory, PageDirectory

memory = PhysicalMemory(64)
pgdir = PageDirectory(memory)
size = pgdir.alloc_uvm(0, 8192)
pgdir.copyout(100, b"hello")
```

Dispatch a system call for a process:

```python
from xv6kit.constants import Syscall
from xv6kit.syscall import Process, SyscallTable

proc = Process(pid=3, eax=Syscall.GETPID)
print(SyscallTable().dispatch(proc))   # 3
```

`SyscallTable` handles `getpid` and `settickets` itself; other calls are
supplied as a mapping of call numbers to handlers. A handler that raises
`SyscallError` makes the call return -1, and an unknown call number is
reported on standard output and returns -1.

Errors: inconsistent use of page tables or physical pages raises
`VmError`, and running out of physical pages raises `MemoryError`; misuse
of locks or of interrupt nesting raises `LockError`; bad system-call
arguments raise `SyscallError`.

## Command line

The word counter is installed as a command. With no file names it reads
standard input:

```
xv6-wc notes.txt other.txt
```

Each file prints its line, word and byte counts followed by its name. A
file that cannot be opened prints `wc: cannot open <name>` and stops the
command with exit status 1.

## What this package does not do

It is a set of separate models, not a running system. There is no
scheduler, no process creation, no file system or disk, and no device
handling. The shell module parses command lines but does not run them,
`Process` holds only a flat memory image and a few registers, and the
system-call table implements only `getpid` and `settickets` on its own.

## Running the tests

```
pip install .[test]
pytest
```