# blockqsim/tests/test_cross_backend.py
import numpy as np
import pytest
from blockqsim import presets
from blockqsim.bench import random_circuit
from blockqsim.circuit import Circuit
from blockqsim.state import Register

pytest.importorskip("numba")

def max_abs_diff(a, b):
    return float(np.max(np.abs(a - b)))

def test_serial_vs_numba_small():
    # 3-channel mixed circuit with a loop and an oracle
    c = (Circuit.empty(3).h(0).x(1).cx(2, 1).h(2)
         .repeat_begin().cx(1, 0).t(2).repeat_end(2)
         .oracle(2, 0b01, 0, 2).ccx(1, 2, 0).swap(2, 0))
    st_s = c.simulate(backend="serial")
    st_n = c.simulate(backend="numba")
    assert max_abs_diff(st_s.as_numpy(), st_n.as_numpy()) < 1e-9

def test_random_circuits_match():
    for n, depth in ((2, 5), (4, 10), (6, 20)):
        c = random_circuit(n, depth, seed=123 + n)
        s = c.simulate(backend="serial")
        t = c.simulate(backend="numba")
        assert np.allclose(s.as_numpy(), t.as_numpy(), atol=1e-9, rtol=0)

def test_unsorted_selection_matches():
    rng = np.random.default_rng(9)
    psi = rng.normal(size=32) + 1j*rng.normal(size=32)
    psi /= np.linalg.norm(psi)
    U, _ = np.linalg.qr(rng.normal(size=(8, 8)) + 1j*rng.normal(size=(8, 8)))
    a, b = Register(5, psi.copy()), Register(5, psi.copy())
    a.apply_matrix([4, 1, 2], U, backend="serial")
    b.apply_matrix([4, 1, 2], U, backend="numba")
    assert max_abs_diff(a.psi, b.psi) < 1e-9

def test_presets_agree():
    for pr in presets.PRESETS:
        c = pr.circuit()
        s = c.run(backend="serial")
        t = c.run(backend="numba")
        assert [v.entangled for v in s] == [v.entangled for v in t]
        assert np.allclose([v.one for v in s], [v.one for v in t], atol=1e-9)
