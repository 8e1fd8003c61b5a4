# blockqsim/presets.py
"""Example circuits shipped with the simulator."""
from dataclasses import dataclass
from typing import List
from .circuit import Circuit
from .state import Qubit

@dataclass(frozen=True)
class Preset:
    name: str
    key: str

    def circuit(self) -> Circuit:
        return _BUILDERS[self.key]()

def bell() -> Circuit:
    return Circuit.empty(2, [Qubit.ZERO, Qubit.ZERO]).h(0).cx(1, 0)

def teleportation() -> Circuit:
    # channel 2 holds |+>, teleported onto channel 1
    c = Circuit.empty(3, [Qubit.ZERO, Qubit.ZERO, Qubit.POS])
    c.h(0).cx(1, 0)
    c.cx(0, 2).h(2)
    c.measure(0).measure(2)
    c.cx(1, 0).cz(1, 2)
    return c

def grover() -> Circuit:
    """Two Grover iterations searching four channels for 0b0101."""
    c = Circuit.empty(5, [Qubit.POS] * 4 + [Qubit.NEG])
    c.repeat_begin()
    c.oracle(4, 0b0101, 0, 4)
    for k in range(4):
        c.h(k)
    c.oracle(4, 0, 0, 4)
    for k in range(4):
        c.h(k)
    c.repeat_end(2)
    for k in range(4):
        c.measure(k)
    return c

_BUILDERS = {"bell": bell, "teleportation": teleportation, "grover": grover}

PRESETS: List[Preset] = [
    Preset("Bell state", "bell"),
    Preset("Teleportation", "teleportation"),
    Preset("Grover's alg.", "grover"),
]

def get(key: str) -> Circuit:
    try:
        return _BUILDERS[key]()
    except KeyError:
        raise KeyError(f"unknown preset {key!r} (expected one of {sorted(_BUILDERS)})") from None
