# blockqsim/circuit.py
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence
import numpy as np
from .errors import CircuitError, UnbalancedLoop
from .gates import GATE_BLOCKS, oracle, oracle_selection
from .program import (MAX_CHANNELS, Block, GateBlock, Measure, Medium, Oracle,
                      RepeatBegin, RepeatEnd, validate_block)
from .state import Qubit, Register

logger = logging.getLogger(__name__)

@dataclass
class Loop:
    block: int  # program position of the repeat-begin
    runs: int = 0

@dataclass(frozen=True)
class Value:
    one: float        # P(channel reads 1)
    entangled: bool   # fails the pairwise independence test

Observer = Callable[[Register], None]


def initial_register(channels: int, initial_values: Sequence[Qubit], dtype=np.complex128) -> Register:
    """Product state of the first ``channels`` initial values, padded with |0>."""
    if not (1 <= channels <= MAX_CHANNELS):
        raise CircuitError(f"channel count must be in 1..{MAX_CHANNELS}, got {channels}")
    qubits = list(initial_values)[:channels]
    qubits += [Qubit.ZERO] * (channels - len(qubits))
    return Register.from_product_state(qubits, dtype=dtype)


def execute(register: Register, blocks: Sequence[Block], backend: str = "serial"):
    """Run ``blocks`` against ``register`` in place.

    Raises CircuitError subclasses for programs that cannot be simulated.
    """
    for block in blocks:
        validate_block(block, register.n)

    loops: List[Loop] = []
    i = 0
    while i < len(blocks):
        block = blocks[i]
        if isinstance(block, RepeatBegin):
            loops.append(Loop(block=i))
        elif isinstance(block, RepeatEnd):
            if not loops:
                raise UnbalancedLoop(f"repeat-end at block {i} has no matching repeat-begin")
            loops[-1].runs += 1
            if loops[-1].runs >= block.count:
                loops.pop()
            else:
                logger.debug("repeat %d/%d, jump to block %d", loops[-1].runs, block.count, loops[-1].block)
                i = loops[-1].block
        elif isinstance(block, Measure):
            register.collapse(block.bind)
        elif isinstance(block, GateBlock):
            U = GATE_BLOCKS[block.gate].matrix(dtype=register.dtype)
            register.apply_matrix(block.binds, U, backend=backend)
        elif isinstance(block, Oracle):
            U = oracle(block.width, block.match, dtype=register.dtype)
            register.apply_matrix(oracle_selection(block.x_bind, block.first_bind, block.width), U, backend=backend)
        elif isinstance(block, Medium):
            pass
        else:
            raise CircuitError(f"not a block: {block!r}")
        i += 1
    return register


def summarize(register: Register) -> List[Value]:
    return [Value(one=register.aggregate(c), entangled=not register.independent(c))
            for c in range(register.n)]


def calc_values(
    channels: int,
    initial_values: Sequence[Qubit],
    blocks: Sequence[Block],
    backend: str = "serial",
    observer: Optional[Observer] = None,
    dtype=np.complex128,
) -> List[Value]:
    """Simulate a block program and summarize every channel.

    Returns one Value per channel, or an empty list when the program cannot
    be simulated (bad binds, bad oracle pattern, unbalanced loops or a
    numerical failure). ``observer`` receives the final register.
    """
    try:
        register = execute(initial_register(channels, initial_values, dtype=dtype), blocks, backend=backend)
        values = summarize(register)
    except (CircuitError, ArithmeticError) as e:
        logger.warning("cannot simulate program: %s", e)
        return []
    if observer is not None:
        observer(register)
    return values


@dataclass
class Circuit:
    channels: int
    blocks: List[Block] = field(default_factory=list)
    initial_values: List[Qubit] = field(default_factory=list)

    @staticmethod
    def empty(channels: int, initial_values: Sequence[Qubit] = ()) -> "Circuit":
        return Circuit(channels, [], list(initial_values))

    def add(self, block: Block): self.blocks.append(block); return self
    def gate(self, gate: str, *binds: int): return self.add(GateBlock(gate, binds))
    def x(self, k: int): return self.gate("x", k)
    def y(self, k: int): return self.gate("y", k)
    def z(self, k: int): return self.gate("z", k)
    def h(self, k: int): return self.gate("h", k)
    def s(self, k: int): return self.gate("s", k)
    def t(self, k: int): return self.gate("t", k)
    def cx(self, t: int, c: int): return self.gate("cx", t, c)
    def cz(self, t: int, c: int): return self.gate("cz", t, c)
    def swap(self, a: int, b: int): return self.gate("swap", a, b)
    def ccx(self, t: int, c1: int, c2: int): return self.gate("ccx", t, c1, c2)
    def measure(self, k: int): return self.add(Measure(k))
    def oracle(self, width: int, match: int, first_bind: int, x_bind: int):
        return self.add(Oracle(width, match, first_bind, x_bind))
    def repeat_begin(self): return self.add(RepeatBegin())
    def repeat_end(self, count: int): return self.add(RepeatEnd(count))
    def medium(self): return self.add(Medium())

    def simulate(self, backend: str = "serial", dtype=np.complex128, check_norm=True, check_norm_tol=None) -> Register:
        """Final register of the program; raises CircuitError if it cannot run."""
        st = execute(initial_register(self.channels, self.initial_values, dtype=dtype), self.blocks, backend=backend)
        if check_norm:
            st.check_normalized(tol=check_norm_tol or 1e-5)
        return st

    def run(self, backend: str = "serial", observer: Optional[Observer] = None, dtype=np.complex128) -> List[Value]:
        return calc_values(self.channels, self.initial_values, self.blocks,
                           backend=backend, observer=observer, dtype=dtype)
