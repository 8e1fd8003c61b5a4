# blockqsim/state.py
import logging
import math
import numpy as np
from dataclasses import dataclass
from typing import ClassVar, Iterable, Optional, Sequence
from . import amplitude as A
from .errors import InvalidDocument

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class Qubit:
    """One channel's state before it is joined into a register."""
    zero: complex
    one: complex

    ZERO: ClassVar["Qubit"]
    ONE: ClassVar["Qubit"]
    POS: ClassVar["Qubit"]
    NEG: ClassVar["Qubit"]
    LABELS: ClassVar[dict]

    def register(self) -> "Register":
        return Register.from_product_state([self])

    def approx(self, ref: "Qubit") -> bool:
        return A.approx_equal(self.zero, ref.zero) and A.approx_equal(self.one, ref.one)

    def to_json(self) -> list:
        return [A.to_pair(self.zero), A.to_pair(self.one)]

    @staticmethod
    def from_json(obj) -> "Qubit":
        try:
            zero, one = obj
            return Qubit(A.from_pair(zero), A.from_pair(one))
        except (TypeError, ValueError) as e:
            raise InvalidDocument(f"bad qubit {obj!r}: {e}") from e

    @staticmethod
    def from_label(label: str) -> "Qubit":
        try:
            return Qubit.LABELS[label]
        except KeyError:
            raise InvalidDocument(f"unknown qubit label {label!r} (expected one of {list(Qubit.LABELS)})") from None

    def label(self):
        """Preset label ("0", "1", "+", "-") this state matches, else None."""
        for name, q in Qubit.LABELS.items():
            if self.approx(q):
                return name
        return None

Qubit.ZERO = Qubit(1+0j, 0j)
Qubit.ONE = Qubit(0j, 1+0j)
Qubit.POS = Qubit(complex(math.sqrt(0.5), 0), complex(math.sqrt(0.5), 0))
Qubit.NEG = Qubit(complex(math.sqrt(0.5), 0), complex(-math.sqrt(0.5), 0))
Qubit.LABELS = {"0": Qubit.ZERO, "1": Qubit.ONE, "+": Qubit.POS, "-": Qubit.NEG}


@dataclass
class Register:
    n: int
    psi: np.ndarray  # shape (2**n,), little-endian: bit b of the index is channel b

    @staticmethod
    def from_product_state(qubits: Sequence[Qubit], dtype=np.complex128) -> "Register":
        """Kronecker product of per-channel states, channel 0 varying fastest."""
        qubits = list(qubits)
        if not qubits:
            raise ValueError("need at least one qubit")
        n = len(qubits)
        psi = np.zeros(1 << n, dtype=dtype)
        psi[0] = qubits[0].zero
        psi[1] = qubits[0].one
        for i in range(1, n):
            mid = 1 << i
            # upper half first: it reads the lower half before that is rescaled
            psi[mid:2*mid] = psi[:mid] * qubits[i].one
            psi[:mid] = psi[:mid] * qubits[i].zero
        return Register(n=n, psi=psi)

    @staticmethod
    def zero(n: int, dtype=np.complex128) -> "Register":
        return Register.from_product_state([Qubit.ZERO] * n, dtype=dtype)

    @property
    def dtype(self):
        return self.psi.dtype

    def norm2(self) -> float:
        return float(np.vdot(self.psi, self.psi).real)

    def check_normalized(self, tol=A.EPSILON):
        n2 = self.norm2()
        if not (abs(1.0 - n2) <= tol):
            raise AssertionError(f"Normalization failed: ||psi||^2={n2}")

    def copy(self) -> "Register":
        return Register(self.n, self.psi.copy())

    def as_numpy(self) -> np.ndarray:
        return self.psi

    def probabilities(self) -> np.ndarray:
        return np.abs(self.psi)**2

    # --------------------------- transforms ---------------------------

    def apply_transform(self, selection: Iterable[int], f):
        """Run f on every 2^m-amplitude slice spanned by ``selection``, in place."""
        from .apply_serial import apply_transform
        apply_transform(self, selection, f)

    def apply_matrix(self, selection: Iterable[int], U: np.ndarray, backend: str = "serial"):
        if backend == "serial":
            from .apply_serial import apply_matrix
        elif backend == "numba":
            try:
                from .apply_numba import apply_matrix
            except ImportError as e:
                raise RuntimeError("Numba backend not available. Did you `pip install numba`?") from e
        else:
            raise NotImplementedError(f"Unknown backend: {backend}")
        apply_matrix(self, list(selection), U)

    def normalize(self):
        self.psi /= math.sqrt(self.norm2())

    # --------------------------- measurement --------------------------

    def _bit_set(self, channel: int) -> np.ndarray:
        if not (0 <= channel < self.n):
            raise IndexError(f"Channel {channel} out of range for {self.n} channels")
        return (np.arange(self.psi.shape[0]) >> channel) & 1 == 1

    def aggregate(self, channel: int) -> float:
        """Probability of reading 1 on ``channel``."""
        return float(self.probabilities()[self._bit_set(channel)].sum())

    def aggregate_joint(self, channels: Iterable[int]) -> float:
        """Probability that every channel in ``channels`` reads 1."""
        sel = np.ones(self.psi.shape[0], dtype=bool)
        for c in set(channels):
            sel &= self._bit_set(c)
        return float(self.probabilities()[sel].sum())

    def collapse(self, channel: int) -> bool:
        """Project ``channel`` onto its more likely outcome and renormalize.

        The outcome is deterministic: 1 when P(1) >= 0.5, else 0.
        Returns True if the channel now reads 1.
        """
        p1 = self.aggregate(channel)
        reads_one = not (p1 < 0.5)
        logger.debug("collapse channel=%d p1=%.6f -> %d", channel, p1, int(reads_one))
        self.psi[self._bit_set(channel) != reads_one] = 0
        self.normalize()
        return reads_one

    def independent(self, channel: int, other: Optional[int] = None) -> bool:
        """Pairwise-correlation separability test.

        With one argument: ``channel`` is independent of every other channel.
        With two: P(a=1, b=1) == P(a=1) P(b=1) within EPSILON. This only
        catches correlations visible in measurement statistics, so some
        entangled states still pass.
        """
        if other is None:
            return all(c == channel or self.independent(c, channel) for c in range(self.n))
        joint = self.aggregate_joint((channel, other))
        return A.zeroish(joint - self.aggregate(channel) * self.aggregate(other))
