"""
Distance-decay functions mapping a raw edge distance to an edge weight.

All functions accept a positive distance in Angstroms and return a positive
weight. Apart from ``identity`` they are monotonically non-increasing.
"""

import math
from typing import Callable, Dict, List


def identity(distance: float) -> float:
    return float(distance)


def inverse(distance: float) -> float:
    return 1.0 / distance


def inverse_square(distance: float) -> float:
    return 1.0 / distance**2


def exponential(distance: float) -> float:
    return math.exp(-distance)


_DECAY_FUNCTIONS: Dict[str, Callable[[float], float]] = {
    "identity": identity,
    "inverse": inverse,
    "inverse_square": inverse_square,
    "exponential": exponential,
}


def get_decay_function(name: str) -> Callable[[float], float]:
    if name not in _DECAY_FUNCTIONS:
        available = ", ".join(sorted(_DECAY_FUNCTIONS))
        raise KeyError(f"Unknown weight decay '{name}'. Available: {available}")
    return _DECAY_FUNCTIONS[name]


def list_decay_functions() -> List[str]:
    return sorted(_DECAY_FUNCTIONS)
