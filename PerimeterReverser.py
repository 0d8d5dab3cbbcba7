# PerimeterReverser - G-code Post-Processor
# "Start where you stopped"
#
# Reverses the traversal direction of every perimeter block in a PrusaSlicer
# G-code file, so consecutive outlines start and end at alternating points
# and the seam is spread instead of stacking up on one spot:
# - Segmenter: finds ;TYPE:Perimeter blocks inside printed objects
# - Movement model: rebuilds absolute machine state line by line
# - Block reverser: re-synthesizes each block backwards (arcs flipped, I/J recomputed)
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# Copyright (c) [2025] [48DESIGN GmbH]
#
import re
import sys
import logging
import os
import argparse
import numpy as np  # For debug image coordinate transforms
from dataclasses import dataclass, field, replace
from typing import Optional, List, Tuple, Iterable, Iterator
from enum import Enum

# =============================================================================
# CONSTANTS
# =============================================================================

# Block boundary markers (exact, case-sensitive prefixes)
OBJECT_START_MARKER = "; printing object"
OBJECT_STOP_MARKER = "; stop printing object"
TYPE_MARKER = ";TYPE:"
WIDTH_MARKER = ";WIDTH:"
HEIGHT_MARKER = ";HEIGHT:"
PERIMETER_TYPE = "Perimeter"
OVERHANG_PERIMETER_TYPE = "Overhang perimeter"
PERIMETER_ENTRY_LINE = TYPE_MARKER + PERIMETER_TYPE

# Machine control commands
ACCELERATION_PREFIX = "M204 S"
FAN_SPEED_PREFIX = "M106 S"

# Output precision (decimal places)
POSITION_PRECISION = 3
EXTRUSION_PRECISION = 5
METADATA_PRECISION = 6  # ;WIDTH: and ;HEIGHT:

# Debug visualization
DEBUG_IMAGE_SIZE = 512  # pixels, longest side of the drawn path
DEBUG_IMAGE_MARGIN = 16  # pixels
DEBUG_MARKER_RADIUS = 4  # pixels

LOG_FILE_NAME = "PerimeterReverser_log.txt"

# =============================================================================
# ENUMS FOR TYPE SAFETY
# =============================================================================

class MotionType(Enum):
    """Motion commands tracked by the movement model"""
    G0 = "G0"  # rapid
    G1 = "G1"  # linear feed
    G2 = "G2"  # clockwise arc
    G3 = "G3"  # counter-clockwise arc
    NONE = None

    @classmethod
    def from_code(cls, code: int) -> Optional['MotionType']:
        """Map a numeric G code to a motion type, None for anything but 0-3"""
        return _MOTION_CODES.get(code)

    @property
    def is_arc(self) -> bool:
        return self in (MotionType.G2, MotionType.G3)

    def reversed(self) -> 'MotionType':
        """Motion type when the same path is travelled backwards"""
        if self is MotionType.G2:
            return MotionType.G3
        if self is MotionType.G3:
            return MotionType.G2
        return self


_MOTION_CODES = {0: MotionType.G0, 1: MotionType.G1, 2: MotionType.G2, 3: MotionType.G3}


class MachineState(Enum):
    """States of the stream segmenter"""
    START_END = "start_end"
    OUTSIDE_PERIMETERS = "outside_perimeters"
    IN_PERIMETERS = "in_perimeters"
    EXIT = "exit"

# =============================================================================
# PIL/PILLOW AVAILABILITY CHECK
# =============================================================================

HAS_PIL = False
try:
    from PIL import Image, ImageDraw
    HAS_PIL = True
except ImportError:
    pass  # only needed for -debug-full images

# =============================================================================
# PRE-COMPILED REGEX PATTERNS
# =============================================================================

REGEX_NUMBER = re.compile(r'\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)')
REGEX_MOTION_CODE = re.compile(r'G([-+]?\d+)')

# =============================================================================
# GCODE PARSING HELPER FUNCTIONS
# =============================================================================

def parse_number(text: str) -> Optional[float]:
    """Parse the numeric literal at the start of text, None if malformed"""
    match = REGEX_NUMBER.match(text)
    return float(match.group(1)) if match else None


def extract_param(code: str, letter: str) -> Optional[float]:
    """Value of the first occurrence of a parameter letter in a command.

    Only the first occurrence counts; if it is not followed by a valid
    number the parameter is treated as absent.
    """
    pos = code.find(letter)
    if pos < 0:
        return None
    return parse_number(code[pos + 1:])


def strip_comment(line: str) -> str:
    """Remove an inline ; comment from a G-code line"""
    return line.split(';', 1)[0]


def format_type_comment(overhang: bool) -> str:
    return TYPE_MARKER + (OVERHANG_PERIMETER_TYPE if overhang else PERIMETER_TYPE)

# =============================================================================
# STATE MANAGEMENT CLASSES
# =============================================================================

@dataclass
class Movement:
    """Cumulative machine state after one G-code line"""
    overhang: bool = False
    line_width: float = 0.0
    line_height: float = 0.0
    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    motion: MotionType = MotionType.NONE
    arc_offset: Tuple[float, float] = (0.0, 0.0)  # I, J; only read for G2/G3
    acceleration: float = 0.0  # M204 S
    fan_speed: float = 0.0  # M106 S
    feedrate: float = 0.0  # F
    extrusion: float = 0.0  # E, per-move delta

    @property
    def xy(self) -> Tuple[float, float]:
        return self.position[0], self.position[1]


def fold_line(movement: Movement, line: str) -> Tuple[Movement, bool]:
    """Fold one G-code line into the machine state.

    Returns the updated state (a new object, ``movement`` is left untouched)
    and whether the line is a real move, i.e. a motion command carrying at
    least one of X, Y, Z or E. Feedrate-only motion lines update the state
    but are not moves.
    """
    if not line:
        return movement, False

    # 1. Metadata comments (PrusaSlicer)
    if line[0] == ';':
        if line.startswith(TYPE_MARKER):
            return replace(movement, overhang=line[len(TYPE_MARKER):] == OVERHANG_PERIMETER_TYPE), False
        if line.startswith(WIDTH_MARKER):
            width = parse_number(line[len(WIDTH_MARKER):])
            if width is not None:
                return replace(movement, line_width=width), False
        elif line.startswith(HEIGHT_MARKER):
            height = parse_number(line[len(HEIGHT_MARKER):])
            if height is not None:
                return replace(movement, line_height=height), False
        return movement, False

    # 2. Acceleration and fan
    if line.startswith(ACCELERATION_PREFIX):
        value = parse_number(line[len(ACCELERATION_PREFIX):])
        if value is not None:
            return replace(movement, acceleration=value), False
        return movement, False
    if line.startswith(FAN_SPEED_PREFIX):
        value = parse_number(line[len(FAN_SPEED_PREFIX):])
        if value is not None:
            return replace(movement, fan_speed=value), False
        return movement, False

    # 3. G0-G3 moves
    code_match = REGEX_MOTION_CODE.match(line)
    if not code_match:
        return movement, False
    motion = MotionType.from_code(int(code_match.group(1)))
    if motion is None:
        return movement, False

    code = strip_comment(line)
    x, y, z = (extract_param(code, axis) for axis in "XYZ")
    e = extract_param(code, 'E')
    f = extract_param(code, 'F')
    i = extract_param(code, 'I')
    j = extract_param(code, 'J')

    old_x, old_y, old_z = movement.position
    old_i, old_j = movement.arc_offset
    updated = replace(
        movement,
        motion=motion,
        position=(
            old_x if x is None else x,
            old_y if y is None else y,
            old_z if z is None else z,
        ),
        extrusion=0.0 if e is None else e,
        feedrate=movement.feedrate if f is None else f,
        arc_offset=(old_i if i is None else i, old_j if j is None else j),
    )
    moved = any(value is not None for value in (x, y, z, e))
    return updated, moved

# =============================================================================
# CONFIGURATION CLASSES
# =============================================================================

@dataclass
class ProcessingConfig:
    """Master configuration for G-code processing"""
    input_file: str
    output_file: Optional[str] = None  # None = modify input in place
    debug: int = 0  # 0 = warnings only, 1 = INFO logging, 2 = INFO + PNG per block

    @property
    def target_file(self) -> str:
        return self.output_file if self.output_file else self.input_file

# =============================================================================
# BLOCK REVERSAL
# =============================================================================

def _fmt(value: float, precision: int = POSITION_PRECISION) -> str:
    return f"{value:.{precision}f}"


def synthesize_reversed_move(current: Movement, previous: Movement, next_move: Movement) -> List[str]:
    """Lines that travel the segment ending at ``current`` backwards.

    ``previous`` is the state before ``current`` in the original order, so
    its position is where the reversed move ends. ``next_move`` is the state
    emitted just before in the reversed output; metadata and mode lines are
    only written where ``current`` differs from it.
    """
    lines = []

    if current.overhang != next_move.overhang:
        lines.append(format_type_comment(current.overhang))
    if current.line_width != next_move.line_width:
        lines.append(f"{WIDTH_MARKER}{_fmt(current.line_width, METADATA_PRECISION)}")
    if current.line_height != next_move.line_height:
        lines.append(f"{HEIGHT_MARKER}{_fmt(current.line_height, METADATA_PRECISION)}")
    # Integer fields are truncated
    if current.acceleration != next_move.acceleration:
        lines.append(f"{ACCELERATION_PREFIX}{int(current.acceleration)}")
    if current.fan_speed != next_move.fan_speed:
        lines.append(f"{FAN_SPEED_PREFIX}{int(current.fan_speed)}")
    if current.feedrate != next_move.feedrate:
        lines.append(f"G1 F{int(current.feedrate)}")

    if current.motion is MotionType.NONE:
        return lines

    parts = [current.motion.reversed().value]
    if current.xy != previous.xy:
        parts.append(f"X{_fmt(previous.position[0])}")
        parts.append(f"Y{_fmt(previous.position[1])}")
    if current.position[2] != previous.position[2]:
        parts.append(f"Z{_fmt(previous.position[2])}")
    if current.motion.is_arc:
        # Same center, measured from the new start point
        center_x = previous.position[0] + current.arc_offset[0]
        center_y = previous.position[1] + current.arc_offset[1]
        parts.append(f"I{_fmt(center_x - current.position[0])}")
        parts.append(f"J{_fmt(center_y - current.position[1])}")
    if current.extrusion != 0:
        parts.append(f"E{_fmt(current.extrusion, EXTRUSION_PRECISION)}")
    lines.append(" ".join(parts))
    return lines


def reverse_block(trace: List[Movement]) -> List[str]:
    """Re-synthesize a perimeter block so it is printed end to start.

    ``trace`` holds the state at block entry, one state per move and
    optionally a final ``MotionType.NONE`` state with the metadata in effect
    when the block ended. The output starts with a travel to the original end
    point and finishes by returning there at the original feedrate and
    acceleration, so the lines following the block see the state they expect.
    A block without moves only gets its mode changes re-emitted.
    """
    if len(trace) < 2:
        return []

    last_original = trace[-1]
    moves = trace[:-1] if last_original.motion is MotionType.NONE else list(trace)
    first_original = moves[0]

    if len(moves) < 2:
        # Nothing to reverse. Carry over the mode changes made inside the
        # block (M204, M106, G1 F, width, height), without any move.
        return synthesize_reversed_move(last_original, first_original, first_original)

    end_x, end_y, _ = last_original.position
    output = [f"G0 X{_fmt(end_x)} Y{_fmt(end_y)}"]

    next_move = replace(first_original, position=last_original.position)
    for index in range(len(moves) - 1, 0, -1):
        current = moves[index]
        output.extend(synthesize_reversed_move(current, moves[index - 1], next_move))
        next_move = current

    output.extend(_restore_lines(last_original))
    return output


def _restore_lines(last_original: Movement) -> List[str]:
    """Return to the block's end point with its final feedrate and acceleration"""
    end_x, end_y, end_z = last_original.position
    return [
        f"G1 X{_fmt(end_x)} Y{_fmt(end_y)} Z{_fmt(end_z)} F{int(last_original.feedrate)}",
        f"{ACCELERATION_PREFIX}{int(last_original.acceleration)}",
    ]

# =============================================================================
# STREAM SEGMENTER
# =============================================================================

def is_perimeter_exit(line: str) -> bool:
    """True for a ;TYPE: marker of anything but a (overhang) perimeter"""
    if not line.startswith(TYPE_MARKER):
        return False
    return line[len(TYPE_MARKER):] not in (PERIMETER_TYPE, OVERHANG_PERIMETER_TYPE)


@dataclass
class PerimeterBlock:
    """Trace of one reversed block, kept for debug output"""
    index: int
    trace: List[Movement] = field(default_factory=list)


class GCodeProcessor:
    """Splits the stream into pass-through and perimeter sections.

    Lines outside perimeter blocks are copied unchanged. Perimeter blocks
    are folded into a trace of machine states and replaced with their
    reversed synthesis when the block ends.
    """

    def __init__(self, keep_traces: bool = False):
        self.movement = Movement()
        self.keep_traces = keep_traces
        self.blocks: List[PerimeterBlock] = []
        self.blocks_reversed = 0
        self.blocks_skipped = 0
        self.unterminated_blocks = 0

    def process(self, lines: Iterable[str]) -> List[str]:
        """Run the state machine over the line source and return the output lines"""
        source = iter(lines)
        output: List[str] = []
        state = MachineState.START_END

        while state is not MachineState.EXIT:
            if state is MachineState.START_END:
                state = self._process_start_end(source, output)
            elif state is MachineState.OUTSIDE_PERIMETERS:
                state = self._process_outside_perimeters(source, output)
            elif state is MachineState.IN_PERIMETERS:
                state = self._process_in_perimeters(source, output)
            else:
                state = MachineState.EXIT

        return output

    def _process_start_end(self, source: Iterator[str], output: List[str]) -> MachineState:
        for line in source:
            output.append(line)
            if line.startswith(OBJECT_START_MARKER):
                return MachineState.OUTSIDE_PERIMETERS
        return MachineState.EXIT

    def _process_outside_perimeters(self, source: Iterator[str], output: List[str]) -> MachineState:
        for line in source:
            output.append(line)
            self.movement, _ = fold_line(self.movement, line)
            if line.startswith(OBJECT_STOP_MARKER):
                return MachineState.START_END
            if line == PERIMETER_ENTRY_LINE:
                return MachineState.IN_PERIMETERS
        return MachineState.EXIT

    def _process_in_perimeters(self, source: Iterator[str], output: List[str]) -> MachineState:
        trace = [self.movement]
        raw_lines = []

        for line in source:
            raw_lines.append(line)
            self.movement, moved = fold_line(self.movement, line)
            if moved:
                trace.append(self.movement)

            if is_perimeter_exit(line):
                next_state = MachineState.OUTSIDE_PERIMETERS
            elif line.startswith(OBJECT_STOP_MARKER):
                next_state = MachineState.START_END
            else:
                continue

            # Final metadata state, not a move
            self.movement = replace(self.movement, motion=MotionType.NONE)
            trace.append(self.movement)
            output.extend(self._reverse(trace))
            output.append(line)
            return next_state

        # No end marker before end of file: the end of the block is unknown,
        # so keep it as it was.
        self.unterminated_blocks += 1
        logging.warning(
            f"Perimeter block not closed before end of file, "
            f"{len(raw_lines)} lines written unchanged"
        )
        output.extend(raw_lines)
        return MachineState.EXIT

    def _reverse(self, trace: List[Movement]) -> List[str]:
        reversed_lines = reverse_block(trace)
        # Entry state and final state only
        if len(trace) <= 2:
            self.blocks_skipped += 1
            logging.info(
                f"Skipped perimeter block without moves, "
                f"{len(reversed_lines)} state lines kept"
            )
            return reversed_lines

        self.blocks_reversed += 1
        logging.info(
            f"Reversed perimeter block {self.blocks_reversed}: "
            f"{len(trace) - 2} moves -> {len(reversed_lines)} lines"
        )
        if self.keep_traces:
            self.blocks.append(PerimeterBlock(index=self.blocks_reversed, trace=list(trace)))
        return reversed_lines

# =============================================================================
# DEBUG VISUALIZATION
# =============================================================================

def generate_block_visualization(block: PerimeterBlock, output_dir: str) -> bool:
    """Save a PNG of one perimeter block.

    The original path is drawn in grey, the reversed path in orange, its new
    start point in green and its new end point in red.

    Returns:
        True if the image was written
    """
    if not HAS_PIL:
        return False

    # Entry position, every move, final position
    points = np.array([m.xy for m in block.trace], dtype=float)
    if len(points) < 2:
        return False

    try:
        mins = points.min(axis=0)
        span = float((points.max(axis=0) - mins).max()) or 1.0
        scale = DEBUG_IMAGE_SIZE / span
        pixels = (points - mins) * scale + DEBUG_IMAGE_MARGIN
        size = int(DEBUG_IMAGE_SIZE + 2 * DEBUG_IMAGE_MARGIN)
        pixels[:, 1] = size - pixels[:, 1]  # Flip Y

        img = Image.new('RGB', (size, size), color='black')
        draw = ImageDraw.Draw(img)
        path = [tuple(p) for p in pixels]
        draw.line(path, fill=(110, 110, 110), width=5)
        draw.line(list(reversed(path)), fill=(255, 140, 0), width=1)

        r = DEBUG_MARKER_RADIUS
        for (px, py), color in ((path[-1], (0, 220, 0)), (path[0], (220, 0, 0))):
            draw.ellipse([px - r, py - r, px + r, py + r], fill=color)

        img_filename = os.path.join(output_dir, f"perimeter_block_{block.index:04d}.png")
        img.save(img_filename)
        logging.info(f"  Saved block visualization: {os.path.basename(img_filename)}")
        return True

    except (OSError, ValueError) as e:
        logging.error(f"Error generating visualization for perimeter block {block.index}: {e}")
        return False

# =============================================================================
# FILE HANDLING
# =============================================================================

class GCodeIOError(OSError):
    """The G-code file could not be read or written"""


def read_gcode_lines(path: str) -> Tuple[List[str], str]:
    """Read a G-code file as lines without line terminators.

    Returns:
        Tuple of (lines, line_ending), the ending taken from the first line
    """
    try:
        with open(path, 'r', encoding='utf-8', errors='surrogateescape', newline='') as infile:
            raw_lines = infile.readlines()
    except OSError as e:
        raise GCodeIOError(f"Cannot read G-code file {path}: {e}") from e

    line_ending = '\r\n' if raw_lines and raw_lines[0].endswith('\r\n') else '\n'
    return [line.rstrip('\r\n') for line in raw_lines], line_ending


def atomic_write_lines(path: str, lines: List[str], line_ending: str = '\n'):
    """Write lines to a temporary sibling file, then move it over path"""
    tmp_path = path + ".tmp"
    try:
        with open(tmp_path, 'w', encoding='utf-8', errors='surrogateescape', newline='') as outfile:
            for line in lines:
                outfile.write(line + line_ending)
        os.replace(tmp_path, path)
    except OSError as e:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise GCodeIOError(f"Cannot write G-code file {path}: {e}") from e

# =============================================================================
# MAIN PROCESSING FUNCTION
# =============================================================================

def process_gcode(config: ProcessingConfig) -> GCodeProcessor:
    """Reverse all perimeter blocks of config.input_file.

    The result is written to config.output_file, or back over the input
    when no output file is given.
    """
    output_file = config.target_file

    logging.info("=" * 85)
    logging.info("PerimeterReverser started")
    logging.info(f"Input file: {config.input_file}")
    logging.info(f"Output file: {output_file if config.output_file else '[IN-PLACE]'}")
    logging.info("=" * 85)

    print("\n" + "=" * 85)
    print("  PERIMETER REVERSER - G-code Post-Processor")
    print("=" * 85)
    print(f"  Input:  {os.path.basename(config.input_file)}")
    print(f"  Output: {'[IN-PLACE] ' if not config.output_file else ''}{os.path.basename(output_file)}")
    print("=" * 85)

    lines, line_ending = read_gcode_lines(config.input_file)
    print(f"Loaded {len(lines):,} lines")

    processor = GCodeProcessor(keep_traces=config.debug >= 2)
    output_lines = processor.process(lines)

    atomic_write_lines(output_file, output_lines, line_ending)
    logging.info(f"Output written to: {output_file}")

    if config.debug >= 2:
        if HAS_PIL:
            debug_dir = os.path.splitext(output_file)[0] + "_debug"
            os.makedirs(debug_dir, exist_ok=True)
            saved = sum(generate_block_visualization(block, debug_dir) for block in processor.blocks)
            print(f"[DEBUG] Generated {saved} perimeter block PNGs in {debug_dir}")
        else:
            logging.warning("PIL/Pillow not available - skipping PNG generation")

    print("\n" + "=" * 85)
    print("  [OK] PERIMETER REVERSAL COMPLETE")
    print("=" * 85)
    print(f"  Perimeter blocks reversed: {processor.blocks_reversed}")
    if processor.blocks_skipped:
        print(f"  Empty perimeter blocks skipped: {processor.blocks_skipped}")
    if processor.unterminated_blocks:
        print(f"  Unterminated blocks left unchanged: {processor.unterminated_blocks}")
    print(f"  Output lines: {len(output_lines):,}")
    print("=" * 85 + "\n")

    return processor

# =============================================================================
# LOGGING
# =============================================================================

class CountingHandler(logging.Handler):
    """Custom logging handler that counts warnings and errors"""

    def __init__(self):
        super().__init__()
        self.warning_count = 0
        self.error_count = 0

    def emit(self, record):
        if record.levelno >= logging.ERROR:
            self.error_count += 1
        elif record.levelno >= logging.WARNING:
            self.warning_count += 1


def setup_logging(log_file: Optional[str], debug: int) -> CountingHandler:
    """Log to file and console; returns the handler counting warnings/errors.

    With no log_file only the console and counting handlers are installed.
    """
    counting_handler = CountingHandler()
    handlers = [logging.StreamHandler(sys.stdout), counting_handler]
    if log_file:
        handlers.insert(0, logging.FileHandler(log_file, mode='w', encoding='utf-8'))
    logging.basicConfig(
        level=logging.INFO if debug >= 1 else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True
    )
    return counting_handler


def _pause_if_interactive():
    # Keeps the console window of a slicer-launched run open
    if sys.stdin is not None and sys.stdin.isatty():
        input("\n  Press ENTER to close this window...")

# =============================================================================
# COMMAND LINE INTERFACE
# =============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = argparse.ArgumentParser(
        description='PerimeterReverser - G-code Post-Processor\n'
                    '"Start where you stopped"\n\n'
                    'Prints every ;TYPE:Perimeter block backwards so outline seams\n'
                    'alternate instead of lining up.',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument('input_file', help='Input G-code file')
    parser.add_argument('-o', '--output', dest='output_file',
                        help='Output G-code file. If not specified, modifies input file IN-PLACE (required for slicer usage). '
                             'Use -o for manual testing to preserve the original file.')

    debug_group = parser.add_mutually_exclusive_group()
    debug_group.add_argument('-debug', '--debug', dest='debug_level', action='store_const', const=1, default=0,
                             help='Enable basic debug mode with standard logging (INFO level)')
    debug_group.add_argument('-debug-full', '--debug-full', dest='debug_level', action='store_const', const=2,
                             help='Enable full debug mode: INFO logging + PNG image per reversed perimeter block')

    args = parser.parse_args(argv)

    config = ProcessingConfig(
        input_file=args.input_file,
        output_file=args.output_file,
        debug=args.debug_level
    )

    log_dir = os.path.dirname(os.path.abspath(config.target_file))
    log_file = os.path.join(log_dir, LOG_FILE_NAME)
    try:
        counting_handler = setup_logging(log_file, config.debug)
    except OSError:
        log_file = os.path.join(os.path.dirname(os.path.abspath(__file__)), LOG_FILE_NAME)
        try:
            counting_handler = setup_logging(log_file, config.debug)
        except OSError as e:
            # Neither location is writable, keep console output only
            log_file = "(console only)"
            counting_handler = setup_logging(None, config.debug)
            logging.warning(f"Cannot create log file: {e}")

    logging.info(f"Command line args: {sys.argv}")

    try:
        process_gcode(config)
    except GCodeIOError as e:
        logging.error(f"FATAL I/O ERROR: {e}")
        print("\n" + "=" * 85, file=sys.stderr)
        print("  ✗ ERROR: G-CODE FILE COULD NOT BE PROCESSED", file=sys.stderr)
        print("=" * 85, file=sys.stderr)
        print(f"  {e}", file=sys.stderr)
        print(f"\n  📄 Check the log file for details: {log_file}", file=sys.stderr)
        _pause_if_interactive()
        return 1
    except Exception as e:
        logging.error(f"\n{'='*70}")
        logging.error(f"FATAL ERROR: {str(e)}")
        logging.error(f"{'='*70}")
        import traceback
        logging.error(traceback.format_exc())

        print("\n" + "=" * 85, file=sys.stderr)
        print("  ✗ ERROR: POST-PROCESSING FAILED", file=sys.stderr)
        print("=" * 85, file=sys.stderr)
        print(f"  {str(e)}", file=sys.stderr)
        print(f"\n  📄 Check the log file for details: {log_file}", file=sys.stderr)
        print("=" * 85, file=sys.stderr)
        _pause_if_interactive()
        return 2

    # Pause if warnings/errors occurred so they can be read
    if counting_handler.warning_count > 0 or counting_handler.error_count > 0:
        print("\n" + "=" * 85)
        print("  ⚠️  PROCESSING COMPLETED WITH ISSUES")
        print("=" * 85)
        if counting_handler.error_count > 0:
            print(f"  ✗ Errors: {counting_handler.error_count}")
        if counting_handler.warning_count > 0:
            print(f"  ⚠️  Warnings: {counting_handler.warning_count}")
        print(f"\n  📄 Check the log file for details: {log_file}")
        print("=" * 85)
        _pause_if_interactive()

    return 0


if __name__ == "__main__":
    sys.exit(main())
