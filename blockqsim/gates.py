# blockqsim/gates.py
# Matrices use the little-endian local basis of the bound channels:
# row/column index bit k belongs to binds[k]. Controlled gates list the
# target first, so CX with binds [t, c] flips bit 0 when bit 1 is set.
import numpy as np
from dataclasses import dataclass
from typing import Callable, Dict, List
from .state import Register

def X(dtype=np.complex128) -> np.ndarray:
    return np.array([[0, 1],
                     [1, 0]], dtype=dtype)

def Y(dtype=np.complex128) -> np.ndarray:
    return np.array([[0, -1j],
                     [1j, 0]], dtype=dtype)

def Z(dtype=np.complex128) -> np.ndarray:
    return np.array([[1, 0],
                     [0, -1]], dtype=dtype)

def H(dtype=np.complex128) -> np.ndarray:
    s = np.sqrt(0.5)
    return np.array([[s, s],
                     [s, -s]], dtype=dtype)

def S(dtype=np.complex128) -> np.ndarray:
    return np.array([[1, 0],
                     [0, 1j]], dtype=dtype)

def T(dtype=np.complex128) -> np.ndarray:
    return np.array([[1, 0],
                     [0, np.exp(0.25j*np.pi)]], dtype=dtype)

def CX(dtype=np.complex128) -> np.ndarray:
    # binds [target, control]: swap local indices 2 <-> 3 (control bit set)
    mat = np.eye(4, dtype=dtype)
    mat[2,2] = 0; mat[3,3] = 0
    mat[2,3] = 1; mat[3,2] = 1
    return mat

def CZ(dtype=np.complex128) -> np.ndarray:
    mat = np.eye(4, dtype=dtype)
    mat[3,3] = -1
    return mat

def SWAP(dtype=np.complex128) -> np.ndarray:
    mat = np.eye(4, dtype=dtype)
    mat[1,1] = 0; mat[2,2] = 0
    mat[1,2] = 1; mat[2,1] = 1
    return mat

def CCX(dtype=np.complex128) -> np.ndarray:
    # binds [target, c1, c2]: flip bit 0 when bits 1 and 2 are set
    mat = np.eye(8, dtype=dtype)
    mat[6,6] = 0; mat[7,7] = 0
    mat[6,7] = 1; mat[7,6] = 1
    return mat

def identity(width: int, dtype=np.complex128) -> np.ndarray:
    return np.eye(1 << width, dtype=dtype)

def oracle(width: int, match: int, dtype=np.complex128) -> np.ndarray:
    """(width+1)-channel conditional flip.

    Local bit 0 is the target; bits 1..width are the controls. The target is
    flipped only when the control bits equal ``match``.
    """
    if not (0 <= match < (1 << width)):
        raise ValueError(f"match {match} does not fit in {width} control bits")
    mat = identity(width + 1, dtype=dtype)
    basis = match << 1
    mat[basis+0, basis+0] = 0; mat[basis+0, basis+1] = 1
    mat[basis+1, basis+0] = 1; mat[basis+1, basis+1] = 0
    return mat

def oracle_selection(x_bind: int, first_bind: int, width: int) -> List[int]:
    """Channel list for an oracle matrix: target, then controls in offset order."""
    return [x_bind] + [first_bind + i for i in range(width)]

def forward(U: np.ndarray) -> Callable[[Register], Register]:
    """Transform whose output amplitude r is row r of U dotted with the input."""
    def f(register: Register) -> Register:
        return Register(register.n, U @ register.psi)
    return f

def is_unitary(U: np.ndarray, tol: float = 1e-10) -> bool:
    U = np.asarray(U)
    return U.shape[0] == U.shape[1] and np.allclose(U.conj().T @ U, np.eye(U.shape[0]), atol=tol)


@dataclass(frozen=True)
class GateSpec:
    name: str
    binds: List[str]  # role label per bound channel, in bind order
    matrix: Callable[..., np.ndarray]

    @property
    def arity(self) -> int:
        return len(self.binds)

    def forward(self, dtype=np.complex128):
        return forward(self.matrix(dtype=dtype))


GATE_BLOCKS: Dict[str, GateSpec] = {
    "x":    GateSpec("Pauli X",      ["X"],             X),
    "y":    GateSpec("Pauli Y",      ["Y"],             Y),
    "z":    GateSpec("Pauli Z",      ["Z"],             Z),
    "h":    GateSpec("Hadamard",     ["H"],             H),
    "s":    GateSpec("Phase 90°",    ["S"],             S),
    "t":    GateSpec("Phase 45°",    ["T"],             T),
    "cx":   GateSpec("Controlled X", ["X", "C"],        CX),
    "cz":   GateSpec("Controlled Z", ["Z", "C"],        CZ),
    "swap": GateSpec("Swap",         ["1", "2"],        SWAP),
    "ccx":  GateSpec("Toffoli",      ["X", "C1", "C2"], CCX),
}
