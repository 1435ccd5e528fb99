import pytest

from xv6kit.constants import NPROC
from xv6kit.pstat import HEADER, ProcInfo, ProcState, format_ps


def test_empty_table_is_header_only():
    assert format_ps([]) == "PID\tTKTS\tTCKS\tSTAT\tNAME\n"


def test_rows_for_slots_in_use():
    table = [
        ProcInfo(True, 10, 1, 5, "init", ProcState.SLEEPING),
        ProcInfo(False, 10, 2, 0, "gone", ProcState.ZOMBIE),
        ProcInfo(True, 20, 3, 7, "sh", ProcState.RUNNING),
    ]
    report = format_ps(table)
    assert report == HEADER + "1\t10\t5\tS\tinit\n" + "3\t20\t7\tR\tsh\n"
    assert "gone" not in report


def test_state_letters_accepted():
    report = format_ps([ProcInfo(True, 10, 4, 0, "ps", "A")])
    assert report.splitlines()[1].split("\t")[3] == "A"
    assert ProcState("Z") is ProcState.ZOMBIE


def test_bad_state_rejected():
    with pytest.raises(ValueError):
        format_ps([ProcInfo(True, 10, 4, 0, "ps", "Q")])


def test_full_table_reports_every_slot():
    table = [ProcInfo(True, 10, pid, 0, "p", ProcState.RUNNABLE) for pid in range(NPROC)]
    assert len(format_ps(table).splitlines()) == NPROC + 1


def test_oversized_table_rejected():
    with pytest.raises(ValueError):
        format_ps([ProcInfo()] * (NPROC + 1))