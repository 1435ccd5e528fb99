"""ELF executable file header and program header records."""

import struct
from dataclasses import astuple, dataclass

ELF_MAGIC = 0x464C457F  # "\x7FELF" in little endian

ELF_PROG_LOAD = 1

ELF_PROG_FLAG_EXEC = 1
ELF_PROG_FLAG_WRITE = 2
ELF_PROG_FLAG_READ = 4

_ELFHDR = struct.Struct("<I12sHHIIIIIHHHHHH")
_PROGHDR = struct.Struct("<8I")

ELFHDR_SIZE = _ELFHDR.size
PROGHDR_SIZE = _PROGHDR.size


class ElfFormatError(ValueError):
    """Raised for data that is not a well-formed ELF image."""


def _pack(layout, values):
    try:
        return layout.pack(*values)
    except struct.error as exc:
        raise ElfFormatError(str(exc)) from exc


@dataclass
class ProgramHeader:
    """One program segment header."""

    type: int = 0
    off: int = 0
    vaddr: int = 0
    paddr: int = 0
    filesz: int = 0
    memsz: int = 0
    flags: int = 0
    align: int = 0

    @classmethod
    def parse(cls, data):
        """Decode a program header from the start of data."""
        if len(data) < PROGHDR_SIZE:
            raise ElfFormatError("truncated program header")
        return cls(*_PROGHDR.unpack_from(data))

    def pack(self):
        """Encode this header as bytes."""
        return _pack(_PROGHDR, astuple(self))

    @property
    def loadable(self):
        return self.type == ELF_PROG_LOAD


@dataclass
class ElfHeader:
    """The ELF file header."""

    magic: int = ELF_MAGIC
    ident: bytes = bytes(12)
    type: int = 0
    machine: int = 0
    version: int = 0
    entry: int = 0
    phoff: int = 0
    shoff: int = 0
    flags: int = 0
    ehsize: int = 0
    phentsize: int = 0
    phnum: int = 0
    shentsize: int = 0
    shnum: int = 0
    shstrndx: int = 0

    def __post_init__(self):
        self.ident = bytes(self.ident)
        if len(self.ident) != 12:
            raise ElfFormatError("ident must be 12 bytes")

    @classmethod
    def parse(cls, data):
        """Decode a file header, checking the magic number."""
        if len(data) < ELFHDR_SIZE:
            raise ElfFormatError("truncated ELF header")
        header = cls(*_ELFHDR.unpack_from(data))
        if header.magic != ELF_MAGIC:
            raise ElfFormatError(f"bad magic {header.magic:#x}")
        return header

    def pack(self):
        """Encode this header as bytes."""
        return _pack(_ELFHDR, astuple(self))

    def program_headers(self, image):
        """The program headers this header describes within image."""
        return [
            ProgramHeader.parse(image[offset:offset + PROGHDR_SIZE])
            for offset in range(
                self.phoff, self.phoff + self.phnum * PROGHDR_SIZE, PROGHDR_SIZE
            )
        ]