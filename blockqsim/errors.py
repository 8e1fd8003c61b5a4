# blockqsim/errors.py
"""Reasons a block program cannot be simulated.

The interpreter raises these internally; ``circuit.calc_values`` turns any of
them into an empty result list.
"""

class CircuitError(ValueError):
    """Base class: the program cannot be simulated as given."""

class InvalidBind(CircuitError):
    """A block references a channel outside the register, repeats a channel,
    or binds the wrong number of channels for its gate."""

class InvalidOracle(CircuitError):
    """Oracle match pattern does not fit in ``width`` control bits."""

class UnbalancedLoop(CircuitError):
    """``repeat-end`` reached with no open ``repeat-begin``."""

class InvalidDocument(CircuitError):
    """A serialized block, qubit or circuit document is malformed."""
