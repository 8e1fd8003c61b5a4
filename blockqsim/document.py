# blockqsim/document.py
"""Circuit documents: ``{"ch": channels, "iv": [qubit...], "bl": [block...]}``.

Qubits use their ``[[zeroRe, zeroIm], [oneRe, oneIm]]`` form and blocks the
JSON form from :mod:`blockqsim.program`. Missing initial values are |0>.
"""
import json
from .circuit import Circuit
from .errors import InvalidDocument
from .program import block_from_json, block_to_json
from .state import Qubit

def to_json(circuit: Circuit) -> dict:
    return {
        "ch": circuit.channels,
        "iv": [q.to_json() for q in circuit.initial_values[:circuit.channels]],
        "bl": [block_to_json(b) for b in circuit.blocks],
    }

def from_json(obj) -> Circuit:
    if not isinstance(obj, dict):
        raise InvalidDocument(f"circuit document must be an object, got {type(obj).__name__}")
    channels = obj.get("ch")
    if isinstance(channels, bool) or not isinstance(channels, int):
        raise InvalidDocument(f"channel count must be an integer, got {channels!r}")
    for key in ("iv", "bl"):
        if not isinstance(obj.get(key, []), list):
            raise InvalidDocument(f"{key!r} must be a list, got {type(obj[key]).__name__}")
    initial_values = [Qubit.from_json(q) for q in obj.get("iv", [])]
    blocks = [block_from_json(b) for b in obj.get("bl", [])]
    return Circuit(channels, blocks, initial_values)

def dumps(circuit: Circuit, **kw) -> str:
    return json.dumps(to_json(circuit), **kw)

def loads(text: str) -> Circuit:
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidDocument(f"not JSON: {e}") from e
    return from_json(obj)

def dump(circuit: Circuit, path: str):
    with open(path, "w") as f:
        f.write(dumps(circuit, indent=2))
        f.write("\n")

def load(path: str) -> Circuit:
    with open(path, "rb") as f:
        data = f.read()
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidDocument(f"not UTF-8 text: {e}") from e
    return loads(text)
