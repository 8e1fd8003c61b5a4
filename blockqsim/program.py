# blockqsim/program.py
"""Block instructions consumed by the interpreter.

A program is a flat list of blocks. Each block type is a small frozen
dataclass whose ``type`` string matches the JSON form the editor stores, e.g.
``{"type": "gate", "gate": "cx", "binds": [1, 0]}``.
"""
from dataclasses import dataclass
from typing import List, Tuple, Union
from .errors import InvalidBind, InvalidDocument, InvalidOracle
from .gates import GATE_BLOCKS

MAX_CHANNELS = 16

@dataclass(frozen=True)
class RepeatBegin:
    type = "repeat-begin"

@dataclass(frozen=True)
class RepeatEnd:
    count: int
    type = "repeat-end"

@dataclass(frozen=True)
class Medium:
    """Spacer spanning all channels; does nothing when run."""
    type = "medium"

@dataclass(frozen=True)
class Measure:
    bind: int
    type = "measure"

@dataclass(frozen=True)
class GateBlock:
    gate: str
    binds: Tuple[int, ...]
    type = "gate"

    def __post_init__(self):
        object.__setattr__(self, "binds", tuple(self.binds))

@dataclass(frozen=True)
class Oracle:
    width: int
    match: int
    first_bind: int
    x_bind: int
    type = "oracle"

    def controls(self) -> List[int]:
        return [self.first_bind + i for i in range(self.width)]

Block = Union[RepeatBegin, RepeatEnd, Medium, Measure, GateBlock, Oracle]

def channel_name(channel: int) -> str:
    """A, B, ..., Z, BA, BB, ... (base 26 with A as the zero digit)."""
    alpha = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    out = ""
    while True:
        out = alpha[channel % 26] + out
        channel //= 26
        if not channel:
            return out

# ---------------------------------------------------------------------

def _check_channel(channel: int, channels: int, what: str):
    if not (0 <= channel < channels):
        raise InvalidBind(f"{what} channel {channel} out of range for {channels} channels")

def validate_block(block: Block, channels: int):
    """Raise InvalidBind / InvalidOracle if ``block`` cannot run on ``channels`` channels."""
    if isinstance(block, (RepeatBegin, Medium)):
        return
    if isinstance(block, RepeatEnd):
        if isinstance(block.count, bool) or not isinstance(block.count, int):
            raise InvalidDocument(f"repeat count must be an integer, got {block.count!r}")
    elif isinstance(block, Measure):
        _check_channel(block.bind, channels, "measure")
    elif isinstance(block, GateBlock):
        spec = GATE_BLOCKS.get(block.gate)
        if spec is None:
            raise InvalidDocument(f"unknown gate {block.gate!r}")
        if len(block.binds) != spec.arity:
            raise InvalidBind(f"gate {block.gate!r} takes {spec.arity} channels, got {len(block.binds)}")
        for b in block.binds:
            _check_channel(b, channels, block.gate)
        if len(set(block.binds)) != len(block.binds):
            raise InvalidBind(f"gate {block.gate!r} binds {list(block.binds)} are not distinct")
    elif isinstance(block, Oracle):
        if block.width < 1:
            raise InvalidOracle(f"oracle width must be >= 1, got {block.width}")
        _check_channel(block.x_bind, channels, "oracle target")
        _check_channel(block.first_bind, channels, "oracle control")
        if block.first_bind + block.width > channels:
            raise InvalidBind(f"oracle controls {block.first_bind}..{block.first_bind + block.width - 1} out of range for {channels} channels")
        if not (0 <= block.match < (1 << block.width)):
            raise InvalidOracle(f"match {block.match} does not fit in {block.width} control bits")
        if block.first_bind <= block.x_bind < block.first_bind + block.width:
            raise InvalidBind(f"oracle target {block.x_bind} overlaps its controls")
    else:
        raise InvalidDocument(f"not a block: {block!r}")

# --------------------------- JSON codec ------------------------------

def block_to_json(block: Block) -> dict:
    if isinstance(block, (RepeatBegin, Medium)):
        return {"type": block.type}
    if isinstance(block, RepeatEnd):
        return {"type": block.type, "count": block.count}
    if isinstance(block, Measure):
        return {"type": block.type, "bind": block.bind}
    if isinstance(block, GateBlock):
        return {"type": block.type, "gate": block.gate, "binds": list(block.binds)}
    if isinstance(block, Oracle):
        return {"type": block.type, "width": block.width, "match": block.match,
                "firstBind": block.first_bind, "xBind": block.x_bind}
    raise InvalidDocument(f"not a block: {block!r}")

def block_from_json(obj: dict) -> Block:
    try:
        kind = obj["type"]
        if kind == "repeat-begin":
            return RepeatBegin()
        if kind == "medium":
            return Medium()
        if kind == "repeat-end":
            return RepeatEnd(int(obj["count"]))
        if kind == "measure":
            return Measure(int(obj["bind"]))
        if kind == "gate":
            return GateBlock(str(obj["gate"]), tuple(int(b) for b in obj["binds"]))
        if kind == "oracle":
            return Oracle(int(obj["width"]), int(obj["match"]),
                          int(obj["firstBind"]), int(obj["xBind"]))
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidDocument(f"bad block {obj!r}: {e}") from e
    raise InvalidDocument(f"unknown block type {kind!r}")
