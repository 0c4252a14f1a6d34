import numpy as np

ELEMENT_DTYPE = np.int32


def generate_inputs(length, low, high, seed=None):
    """Return three int32 arrays of cuboid edge lengths drawn from [low, high]."""
    rng = np.random.default_rng(seed)
    return tuple(
        rng.integers(low, high, size=length, dtype=ELEMENT_DTYPE, endpoint=True)
        for _ in range(3)
    )
