from qlemu.trace import (
    BACKTRACE_SIZE,
    BacktraceEvent,
    TraceRange,
    Tracer,
    exception_name,
)


def test_pc_in_rom():
    tracer = Tracer()
    found = tracer.find_range(0x100)
    assert found is not None and found.comment == "ROM"
    assert tracer.current == found


def test_pc_in_ram():
    assert Tracer().find_range(0x30000).comment == "RAM"


def test_pc_between_ranges_picks_next_above():
    assert Tracer().find_range(0x20000).comment == "RAM"


def test_pc_beyond_all_ranges():
    assert Tracer().find_range(0x200000) is None


def test_custom_ranges_pick_lowest_above():
    ranges = [TraceRange(0x5000, 0x6000, "b"), TraceRange(0x3000, 0x4000, "a")]
    assert Tracer(ranges).find_range(0x1000).comment == "a"


def test_exception_names():
    assert exception_name(4) == "\tException Illegal code \t"
    assert exception_name(33) == "\tTRAP #1\t"
    assert exception_name(25) == "\tInterrupt #1\t"


def test_empty_backtrace_is_unchanged():
    assert Tracer().backtrace(10) == ["BackTrace:", "\tunchanged"]


def test_backtrace_lists_event_then_unchanged():
    tracer = Tracer()
    tracer.add_event(0x1000, 0x2000, BacktraceEvent.RTS)
    assert tracer.backtrace(1) == ["BackTrace:", "\t RTS\tat PC=1000, new pc=2000"]
    assert tracer.backtrace(1) == ["BackTrace:", "\tunchanged"]


def test_backtrace_exception_event():
    tracer = Tracer()
    tracer.add_event(0x10, 0x20, -2)
    assert tracer.backtrace(1)[1].startswith("\tException bus error \t")


def test_backtrace_most_recent_first():
    tracer = Tracer()
    tracer.add_event(1, 1, BacktraceEvent.JSR)
    tracer.add_event(2, 2, BacktraceEvent.BSR)
    lines = tracer.backtrace(5)
    assert len(lines) == 3
    assert "BSR" in lines[1] and "JSR" in lines[2]


def test_backtrace_capped_at_buffer_size():
    tracer = Tracer()
    for i in range(150):
        tracer.add_event(i, i, BacktraceEvent.RTE)
    assert len(tracer.backtrace(1000)) == BACKTRACE_SIZE + 1


def test_unknown_positive_event():
    tracer = Tracer()
    tracer.add_event(0, 0, 9)
    assert "unknown" in tracer.backtrace(1)[1]