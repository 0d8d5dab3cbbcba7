from dataclasses import replace

from PerimeterReverser import (
    Movement,
    MotionType,
    reverse_block,
    synthesize_reversed_move,
)


def move(x, y, z=0.0, e=0.0, motion=MotionType.G1, **kwargs):
    return Movement(position=(x, y, z), extrusion=e, motion=motion, **kwargs)


def test_linear_move_goes_back_to_previous_position():
    previous = move(0, 0)
    current = move(1, 1, e=0.25)
    assert synthesize_reversed_move(current, previous, current) == ["G1 X0.000 Y0.000 E0.25000"]


def test_clockwise_arc_becomes_counter_clockwise():
    previous = move(0, 0)
    current = move(2, 0, e=0.3, motion=MotionType.G2, arc_offset=(1.0, 0.0))
    assert synthesize_reversed_move(current, previous, current) == [
        "G3 X0.000 Y0.000 I-1.000 J0.000 E0.30000"
    ]


def test_counter_clockwise_arc_becomes_clockwise():
    previous = move(0, 0)
    current = move(1, 1, motion=MotionType.G3, arc_offset=(0.0, 1.0))
    # center (0, 1) seen from (1, 1)
    assert synthesize_reversed_move(current, previous, current) == ["G2 X0.000 Y0.000 I-1.000 J0.000"]


def test_rapid_move_stays_rapid():
    previous = move(0, 0)
    current = move(5, 0, motion=MotionType.G0)
    assert synthesize_reversed_move(current, previous, current) == ["G0 X0.000 Y0.000"]


def test_unchanged_axes_are_omitted():
    previous = move(1, 0, z=0.4)
    current = move(1, 0, z=0.2)
    assert synthesize_reversed_move(current, previous, current) == ["G1 Z0.400"]


def test_xy_are_written_together():
    previous = move(1, 0)
    current = move(1, 1, e=1.0)
    assert synthesize_reversed_move(current, previous, current) == ["G1 X1.000 Y0.000 E1.00000"]


def test_state_changes_are_emitted_in_order():
    previous = move(0, 0)
    current = move(
        1, 0, e=0.1,
        overhang=True, line_width=0.5, line_height=0.3,
        acceleration=1500.7, fan_speed=127.9, feedrate=2400.9,
    )
    next_move = move(1, 0)
    assert synthesize_reversed_move(current, previous, next_move) == [
        ";TYPE:Overhang perimeter",
        ";WIDTH:0.500000",
        ";HEIGHT:0.300000",
        "M204 S1500",
        "M106 S127",
        "G1 F2400",
        "G1 X0.000 Y0.000 E0.10000",
    ]


def test_back_to_regular_perimeter_type():
    current = move(1, 0)
    next_move = move(2, 0, overhang=True)
    lines = synthesize_reversed_move(current, move(0, 0), next_move)
    assert lines[0] == ";TYPE:Perimeter"


def test_no_motion_line_for_idle_state():
    current = move(1, 0, motion=MotionType.NONE, fan_speed=100)
    assert synthesize_reversed_move(current, move(0, 0), move(1, 0)) == ["M106 S100"]


def test_degenerate_traces_produce_nothing():
    assert reverse_block([]) == []
    assert reverse_block([move(0, 0)]) == []
    # entry state plus idle end state, no moves
    entry = move(3, 3)
    assert reverse_block([entry, replace(entry, motion=MotionType.NONE)]) == []


def test_block_without_moves_emits_only_mode_changes():
    entry = move(3, 3, acceleration=1000.0)
    end = replace(entry, motion=MotionType.NONE, acceleration=500.0, feedrate=1200.0, fan_speed=127.5)
    assert reverse_block([entry, end]) == ["M204 S500", "M106 S127", "G1 F1200"]


def _simple_trace():
    s0 = move(0, 0)
    s1 = move(1, 0, e=1.0)
    s2 = move(1, 1, e=1.0)
    return [s0, s1, s2, replace(s2, motion=MotionType.NONE)]


def test_reverse_simple_block():
    assert reverse_block(_simple_trace()) == [
        "G0 X1.000 Y1.000",
        "G1 X1.000 Y0.000 E1.00000",
        "G1 X0.000 Y0.000 E1.00000",
        "G1 X1.000 Y1.000 Z0.000 F0",
        "M204 S0",
    ]


def test_trace_ending_with_a_move_is_fully_reversed():
    trace = _simple_trace()[:-1]
    assert reverse_block(trace) == reverse_block(_simple_trace())


def test_reverse_does_not_modify_trace():
    trace = _simple_trace()
    snapshot = list(trace)
    reverse_block(trace)
    assert trace == snapshot


def test_reverse_restores_feedrate_and_acceleration():
    entry = move(0, 0, line_width=0.4, acceleration=1000, feedrate=3000)
    a = move(10, 0, e=0.5, line_width=0.45, acceleration=1000, feedrate=1200)
    b = move(10, 10, e=0.5, line_width=0.45, acceleration=500, feedrate=1200)
    final = replace(b, motion=MotionType.NONE)

    assert reverse_block([entry, a, b, final]) == [
        "G0 X10.000 Y10.000",
        ";WIDTH:0.450000",
        "M204 S500",
        "G1 F1200",
        "G1 X10.000 Y0.000 E0.50000",
        "M204 S1000",
        "G1 X0.000 Y0.000 E0.50000",
        "G1 X10.000 Y10.000 Z0.000 F1200",
        "M204 S500",
    ]


def test_reversed_arc_block_keeps_endpoints():
    entry = move(0, 0, z=0.2, feedrate=1800.5, acceleration=800)
    arc = move(2, 0, z=0.2, e=0.2, motion=MotionType.G2, arc_offset=(1.0, 0.0),
               feedrate=1800.5, acceleration=800)
    lines = reverse_block([entry, arc, replace(arc, motion=MotionType.NONE)])

    assert lines[0] == "G0 X2.000 Y0.000"
    assert lines[1] == "G3 X0.000 Y0.000 I-1.000 J0.000 E0.20000"
    assert lines[-2] == "G1 X2.000 Y0.000 Z0.200 F1800"
    assert lines[-1] == "M204 S800"
