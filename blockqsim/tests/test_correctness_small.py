# blockqsim/tests/test_correctness_small.py
import numpy as np
from blockqsim.circuit import Circuit, Value, calc_values
from blockqsim.program import GateBlock, Oracle, RepeatBegin, RepeatEnd
from blockqsim.state import Qubit

def almost(p, q, tol=1e-6):
    return np.allclose(p, q, atol=tol, rtol=0)

def ones(values):
    return [v.one for v in values]

def test_single_x_gate():
    values = calc_values(1, [Qubit.ZERO], [GateBlock("x", [0])])
    assert len(values) == 1
    assert almost(values[0].one, 1.0)
    assert values[0].entangled is False

def test_hadamard_alone():
    values = calc_values(1, [Qubit.ZERO], [GateBlock("h", [0])])
    assert almost(ones(values), [0.5])
    assert not values[0].entangled

def test_bell_pair():
    values = Circuit.empty(2, [Qubit.ZERO, Qubit.ZERO]).h(0).cx(1, 0).run()
    assert almost(ones(values), [0.5, 0.5])
    assert [v.entangled for v in values] == [True, True]

def test_unbalanced_loop_is_invalid():
    assert calc_values(1, [Qubit.ZERO], [RepeatEnd(1)]) == []

def test_out_of_range_oracle_is_invalid():
    assert calc_values(3, [], [Oracle(width=2, match=4, first_bind=0, x_bind=2)]) == []

def test_out_of_range_bind_is_invalid():
    assert Circuit.empty(2).x(2).run() == []
    assert Circuit.empty(2).measure(5).run() == []
    assert Circuit.empty(3).oracle(2, 1, 2, 0).run() == []  # controls 2,3

def test_repeated_bind_is_invalid():
    assert Circuit.empty(2).cx(1, 1).run() == []

def test_wrong_arity_is_invalid():
    assert calc_values(3, [], [GateBlock("cx", [0, 1, 2])]) == []

def test_channel_count_limits():
    assert calc_values(0, [], []) == []
    assert calc_values(17, [], []) == []
    assert len(calc_values(16, [], [])) == 16

def test_cx_control_off_noop():
    # control (channel 0) is |0>, so target channel 1 stays |0>
    values = Circuit.empty(2).cx(1, 0).run()
    assert almost(ones(values), [0.0, 0.0])

def test_cx_control_on_flips():
    values = Circuit.empty(2).x(0).cx(1, 0).run()
    assert almost(ones(values), [1.0, 1.0])
    assert not any(v.entangled for v in values)

def test_ccx_needs_both_controls():
    assert almost(ones(Circuit.empty(3).x(1).ccx(0, 1, 2).run()), [0, 1, 0])
    assert almost(ones(Circuit.empty(3).x(1).x(2).ccx(0, 1, 2).run()), [1, 1, 1])

def test_swap_moves_state():
    values = Circuit.empty(3).x(0).swap(0, 2).run()
    assert almost(ones(values), [0, 0, 1])

def test_initial_values_padded_and_truncated():
    assert almost(ones(calc_values(3, [Qubit.ONE], [])), [1, 0, 0])
    assert almost(ones(calc_values(1, [Qubit.ONE, Qubit.ONE], [])), [1])
    assert almost(ones(calc_values(2, [Qubit.POS, Qubit.NEG], [])), [0.5, 0.5])

def test_repeat_runs_body_count_times():
    def program(count):
        return [RepeatBegin(), GateBlock("x", [0]), RepeatEnd(count)]
    assert almost(ones(calc_values(1, [], program(1))), [1])
    assert almost(ones(calc_values(1, [], program(2))), [0])
    assert almost(ones(calc_values(1, [], program(3))), [1])

def test_nested_repeat():
    # outer x3 of (inner x2 of X, then X): 9 flips in total
    c = Circuit.empty(1).repeat_begin().repeat_begin().x(0).repeat_end(2).x(0).repeat_end(3)
    assert almost(ones(c.run()), [1])
    # outer x2 of the same body: 6 flips
    c = Circuit.empty(1).repeat_begin().repeat_begin().x(0).repeat_end(2).x(0).repeat_end(2)
    assert almost(ones(c.run()), [0])

def test_unclosed_repeat_runs_once():
    assert almost(ones(Circuit.empty(1).repeat_begin().x(0).run()), [1])

def test_medium_is_noop():
    assert almost(ones(Circuit.empty(2).x(1).medium().run()), [0, 1])

def test_oracle_flips_on_match():
    # control channels 0,1 read (1, 0) = 0b01
    hit = Circuit.empty(3).x(0).oracle(2, 0b01, 0, 2).run()
    miss = Circuit.empty(3).x(0).oracle(2, 0b10, 0, 2).run()
    assert almost(ones(hit), [1, 0, 1])
    assert almost(ones(miss), [1, 0, 0])

def test_oracle_target_below_controls():
    # target 0, controls 1..2 must read 0b11
    c = Circuit.empty(3).x(1).x(2).oracle(2, 0b11, 1, 0)
    assert almost(ones(c.run()), [1, 1, 1])

def test_measure_collapses_bell_pair():
    values = Circuit.empty(2).h(0).cx(1, 0).measure(0).run()
    assert almost(values[0].one, values[1].one)
    assert almost(values[0].one, 0.0) or almost(values[0].one, 1.0)
    assert not any(v.entangled for v in values)

def test_observer_receives_final_register():
    seen = []
    values = Circuit.empty(2).h(0).cx(1, 0).run(observer=seen.append)
    assert len(values) == 2 and len(seen) == 1
    reg = seen[0]
    assert reg.n == 2
    assert almost(reg.probabilities(), [0.5, 0, 0, 0.5])

def test_observer_not_called_on_invalid_program():
    seen = []
    assert calc_values(1, [], [RepeatEnd(1)], observer=seen.append) == []
    assert seen == []

def test_value_fields():
    v = Value(one=0.25, entangled=False)
    assert v.one == 0.25 and v.entangled is False

def test_normalization():
    st = Circuit.empty(3).h(0).h(1).cx(2, 1).t(0).s(2).ccx(0, 1, 2).measure(1).y(0).simulate()
    n2 = float((st.as_numpy().conj()*st.as_numpy()).sum().real)
    assert abs(1.0 - n2) < 1e-6

def test_oversized_oracle_is_invalid():
    # range is rejected before the 2^width pattern bound is ever computed
    assert calc_values(3, [], [Oracle(width=2**40, match=0, first_bind=0, x_bind=2)]) == []
    assert calc_values(3, [], [Oracle(width=3, match=0, first_bind=1, x_bind=0)]) == []
