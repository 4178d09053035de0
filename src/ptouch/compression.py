"""
PackBits ("TIFF") run-length codec for raster lines.

Each run starts with a signed control byte:
    -(n - 1)  the next byte is repeated n times
    n - 1     the next n bytes are copied literally

This is a raster-line codec rather than a general PackBits
implementation: input is limited to MAX_INPUT_LENGTH bytes so no run can
overflow a single control byte, and encodings longer than a raster line
are replaced with one literal run over the whole input.
"""

from dataclasses import dataclass, field
from typing import Union

from .device import RASTER_LINE_BYTES
from .exceptions import CompressionError

# Longest run a single control byte can describe
MAX_INPUT_LENGTH = 128

# Encodings longer than this fall back to a single literal run
MAX_ENCODED_LENGTH = RASTER_LINE_BYTES


@dataclass
class Pending:
    """One buffered byte, run kind not decided yet."""
    value: int


@dataclass
class Repeat:
    """`count` consecutive copies of `value`."""
    value: int
    count: int


@dataclass
class Literal:
    """Adjacent bytes with no two neighbours equal."""
    values: bytearray = field(default_factory=bytearray)


RunState = Union[Pending, Repeat, Literal]


def _emit_repeat(out: bytearray, value: int, count: int) -> None:
    out.append((1 - count) & 0xFF)
    out.append(value)


def _emit_literal(out: bytearray, values: bytes) -> None:
    out.append(len(values) - 1)
    out.extend(values)


def step(state: RunState, byte: int, out: bytearray) -> RunState:
    """
    Advance the encoder by one input byte.

    Completed runs are appended to `out`; the returned state describes
    the run that is still open.
    """
    if isinstance(state, Pending):
        if byte == state.value:
            return Repeat(state.value, 2)
        return Literal(bytearray((state.value, byte)))

    if isinstance(state, Repeat):
        if byte == state.value:
            return Repeat(state.value, state.count + 1)
        _emit_repeat(out, state.value, state.count)
        return Pending(byte)

    if byte != state.values[-1]:
        state.values.append(byte)
        return state

    # The last literal byte starts a repeat run instead
    _emit_literal(out, state.values[:-1])
    return Repeat(byte, 2)


def flush(state: RunState, out: bytearray) -> None:
    """Write out the run left open at the end of input."""
    if isinstance(state, Pending):
        _emit_literal(out, bytes((state.value,)))
    elif isinstance(state, Repeat):
        _emit_repeat(out, state.value, state.count)
    else:
        _emit_literal(out, state.values)


def compress(data: bytes) -> bytes:
    """
    Compress a raster line.

    Args:
        data: 1 to MAX_INPUT_LENGTH bytes

    Returns:
        PackBits encoded bytes. When the encoding is longer than a raster
        line, a single literal run (one control byte plus the raw input)
        is returned instead, so the output never grows by more than one
        byte.

    Raises:
        CompressionError: If data is empty or too long
    """
    if not data:
        raise CompressionError("Cannot compress empty data")
    if len(data) > MAX_INPUT_LENGTH:
        raise CompressionError(
            f"Input length ({len(data)}) exceeds maximum ({MAX_INPUT_LENGTH})"
        )

    out = bytearray()
    state: RunState = Pending(data[0])
    for byte in data[1:]:
        state = step(state, byte, out)
    flush(state, out)

    if len(out) > MAX_ENCODED_LENGTH:
        out = bytearray()
        _emit_literal(out, data)

    return bytes(out)


def decompress(data: bytes) -> bytes:
    """
    Expand PackBits encoded bytes.

    Raises:
        CompressionError: If a run is truncated
    """
    out = bytearray()
    i = 0

    while i < len(data):
        control = data[i]
        if control >= 0x80:
            control -= 0x100
        i += 1

        if control < 0:
            if i >= len(data):
                raise CompressionError(f"Truncated repeat run at offset {i - 1}")
            out.extend(bytes((data[i],)) * (1 - control))
            i += 1
        else:
            end = i + control + 1
            if end > len(data):
                raise CompressionError(f"Truncated literal run at offset {i - 1}")
            out.extend(data[i:end])
            i = end

    return bytes(out)
