import pytest

from xv6kit.mmu import (
    DPL_USER,
    KERNBASE,
    PGSIZE,
    SEG_KCODE,
    STA_R,
    STA_W,
    STA_X,
    STS_IG32,
    STS_T32A,
    STS_TG32,
    GateDescriptor,
    SegmentDescriptor,
    p2v,
    pdx,
    pgaddr,
    pgrounddown,
    pgroundup,
    pte_addr,
    pte_flags,
    ptx,
    seg,
    seg16,
    seg_asm,
    set_gate,
    v2p,
)

ADDRESSES = [0, 1, 0x1234, 0x7FFFF, 0x80000000, 0x80105678, 0xFFFFFFFF, 0xDEADB000]


@pytest.mark.parametrize("va", ADDRESSES)
def test_pgaddr_reassembles_address(va):
    assert pgaddr(pdx(va), ptx(va), va & 0xFFF) == va


@pytest.mark.parametrize("sz", [1, 4095, 4096, 4097, 0x12345, 0x7FFFF000])
def test_pgroundup_invariants(sz):
    up = pgroundup(sz)
    assert up % PGSIZE == 0
    assert sz <= up < sz + PGSIZE


@pytest.mark.parametrize("a", ADDRESSES)
def test_pgrounddown_invariants(a):
    down = pgrounddown(a)
    assert down % PGSIZE == 0
    assert a - PGSIZE < down <= a


@pytest.mark.parametrize("pte", [0, 0x7, 0x1234567, 0xFFFFFFFF])
def test_pte_split(pte):
    assert pte_addr(pte) | pte_flags(pte) == pte
    assert pte_addr(pte) & 0xFFF == 0


@pytest.mark.parametrize("pa", [0, 0x100000, 0xDFFF000])
def test_v2p_p2v_round_trip(pa):
    assert v2p(p2v(pa)) == pa
    assert p2v(pa) - KERNBASE == pa


def test_v2p_of_kernbase_is_zero():
    assert v2p(KERNBASE) == 0


def test_kernel_code_segment_bytes():
    assert seg_asm(STA_X | STA_R, 0, 0xFFFFFFFF) == b"\xff\xff\x00\x00\x00\x9a\xcf\x00"


@pytest.mark.parametrize(
    "type_, base, limit",
    [
        (STA_X | STA_R, 0, 0xFFFFFFFF),
        (STA_W, 0, 0xFFFFFFFF),
        (STA_W, 0x12345678, 0x0ABCDEF0),
    ],
)
def test_seg_matches_seg_asm(type_, base, limit):
    assert seg(type_, base, limit, 0).to_bytes() == seg_asm(type_, base, limit)


def test_seg_user_dpl_and_base():
    desc = seg(STA_W, 0x12345678, 0xFFFFFFFF, DPL_USER)
    assert desc.dpl == DPL_USER
    assert desc.base == 0x12345678
    assert desc.g == 1


def test_seg16_round_trip():
    desc = seg16(STS_T32A, 0x80112233, 0x67, 0)
    assert desc.g == 0
    assert desc.lim_15_0 == 0x67
    assert SegmentDescriptor.from_bytes(desc.to_bytes()) == desc


def test_segment_field_overflow_rejected():
    with pytest.raises(ValueError):
        SegmentDescriptor(lim_15_0=0x10000)


def test_descriptor_wrong_length_rejected():
    with pytest.raises(ValueError):
        SegmentDescriptor.from_bytes(bytes(7))
    with pytest.raises(ValueError):
        GateDescriptor.from_bytes(bytes(9))


def test_trap_gate():
    off = 0x80105678
    gate = set_gate(True, SEG_KCODE << 3, off, DPL_USER)
    assert gate.type == STS_TG32
    assert gate.dpl == DPL_USER
    assert gate.p == 1
    assert gate.offset == off
    assert gate.cs == SEG_KCODE << 3


def test_interrupt_gate_round_trip():
    gate = set_gate(False, SEG_KCODE << 3, 0x80106ABC, 0)
    assert gate.type == STS_IG32
    assert GateDescriptor.from_bytes(gate.to_bytes()) == gate


def test_gate_field_overflow_rejected():
    with pytest.raises(ValueError):
        GateDescriptor(dpl=4)