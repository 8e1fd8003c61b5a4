# blockqsim/apply_numba.py
import numpy as np
from numba import njit, prange, set_num_threads, get_num_threads
from .apply_serial import check_selection, local_offsets
from .state import Register

# ---------- low-level kernel (Numba JIT) ----------

@njit(parallel=True, fastmath=True)
def _embed_kernel(psi, U, offsets, free_bits):
    # Each prange iteration owns one base index (all selected bits clear) and
    # the disjoint group of amplitudes reachable from it, so no two
    # iterations touch the same entry.
    dim = offsets.shape[0]
    nfree = free_bits.shape[0]
    for j in prange(1 << nfree):
        jj = np.int64(j)
        base = np.int64(0)
        for b in range(nfree):
            if (jj >> b) & 1:
                base |= 1 << free_bits[b]
        a = np.empty_like(psi[:dim])
        for p in range(dim):
            a[p] = psi[base | offsets[p]]
        for r in range(dim):
            acc = U[r, 0] * a[0]
            for c in range(1, dim):
                acc += U[r, c] * a[c]
            psi[base | offsets[r]] = acc

# ---------- user-facing apply helpers ----------

def set_threads(n: int):
    set_num_threads(n)

def get_threads() -> int:
    return get_num_threads()

def apply_matrix(state: Register, selection, U: np.ndarray):
    """Same contract as apply_serial.apply_matrix, run as a parallel kernel."""
    sel = check_selection(state.n, selection)
    m = len(sel)
    U = np.ascontiguousarray(U, dtype=state.dtype)
    if U.shape != (1 << m, 1 << m):
        raise ValueError(f"U must be {(1 << m, 1 << m)} for {m} channels, got {U.shape}")
    free_bits = np.array([b for b in range(state.n) if b not in sel], dtype=np.int64)
    _embed_kernel(state.psi, U, local_offsets(sel), free_bits)
