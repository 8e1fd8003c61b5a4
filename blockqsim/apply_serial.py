# blockqsim/apply_serial.py
import numpy as np
from .errors import InvalidBind
from .gates import forward
from .state import Register

def check_selection(n: int, selection) -> tuple:
    """Selected channels must be distinct and inside an n-channel register."""
    sel = tuple(int(k) for k in selection)
    if not sel:
        raise InvalidBind("empty channel selection")
    for k in sel:
        if not (0 <= k < n):
            raise InvalidBind(f"channel {k} out of range for {n} channels")
    if len(set(sel)) != len(sel):
        raise InvalidBind(f"channels {list(sel)} are not distinct")
    return sel

def selection_mask(selection) -> int:
    mask = 0
    for k in selection:
        mask |= 1 << k
    return mask

def local_offsets(selection) -> np.ndarray:
    """offsets[p] = global index bits for local sub-index p.

    Bit ``b`` of p maps to channel ``selection[b]``, so the order of
    ``selection`` (not its sorted order) defines the local basis.
    """
    m = len(selection)
    offsets = np.zeros(1 << m, dtype=np.int64)
    for p in range(1, 1 << m):
        low = p & -p
        b = low.bit_length() - 1
        offsets[p] = offsets[p ^ low] | (1 << selection[b])
    return offsets

def apply_transform(state, selection, f):
    """Apply f to the 2^m-dim subspace of the selected channels, in place.

    f receives a Register over m channels and returns one of the same size.
    It is called once per assignment of the unselected bits (2^(n-m) times).
    """
    n = state.n
    sel = check_selection(n, selection)
    m = len(sel)
    psi = state.psi
    mask = selection_mask(sel)
    offsets = local_offsets(sel)

    bits = 0
    for _ in range(1 << (n - m)):
        idx = offsets | bits
        out = f(Register(m, psi[idx]))
        if out.psi.shape != idx.shape:
            raise ValueError(f"transform returned {out.psi.shape[0]} amplitudes, expected {idx.shape[0]}")
        psi[idx] = out.psi
        # next counter value with every selected bit clear (carry skips the mask)
        bits = ((bits | mask) + 1) & ~mask

def apply_matrix(state, selection, U: np.ndarray):
    """Apply a 2^m x 2^m matrix U to the selected channels (little-endian local basis)."""
    m = len(selection)
    U = np.asarray(U, dtype=state.dtype)
    if U.shape != (1 << m, 1 << m):
        raise ValueError(f"U must be {(1 << m, 1 << m)} for {m} channels, got {U.shape}")
    apply_transform(state, selection, forward(U))
