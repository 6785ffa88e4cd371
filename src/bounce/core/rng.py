"""Explicitly threaded random number generation for render rows.

Every row of the image owns one generator. The generator state is a single
``u32`` that is passed into each sampling function and handed back together
with the sampled value, so no Taichi function touches a hidden global
generator and a row's sample sequence depends only on ``(seed, row)``.

The generator is a 32-bit xorshift whose initial state is produced by
hashing the render seed together with the row index (Wang hash), which keeps
neighbouring rows decorrelated.

Example:
    >>> @ti.kernel
    ... def fill(out: ti.types.ndarray(dtype=ti.f64, ndim=1), seed: ti.u32):
    ...     state = seed_row(seed, 0)
    ...     for k in range(out.shape[0]):
    ...         value, state = random_float(state)
    ...         out[k] = value
"""

import taichi as ti

# 2^-32, maps a u32 into [0, 1)
_U32_SCALE = 1.0 / 4294967296.0

# Replacement for the xorshift fixed point at zero
_NONZERO_STATE = 1831565813


@ti.func
def _wang_hash(value: ti.u32) -> ti.u32:
    """Scramble a 32-bit integer (Thomas Wang's integer hash)."""
    h = value
    h = (h ^ ti.cast(61, ti.u32)) ^ (h >> 16)
    h = h * ti.cast(9, ti.u32)
    h = h ^ (h >> 4)
    h = h * ti.cast(668265261, ti.u32)
    h = h ^ (h >> 15)
    return h


@ti.func
def seed_row(seed: ti.u32, row: ti.i32) -> ti.u32:
    """Derive the initial generator state for one image row.

    Args:
        seed: The render seed.
        row: The row index.

    Returns:
        A non-zero generator state.
    """
    state = _wang_hash(_wang_hash(seed) ^ ti.cast(row + 1, ti.u32))
    if state == 0:
        state = ti.cast(_NONZERO_STATE, ti.u32)
    return state


@ti.func
def next_u32(state: ti.u32):
    """Advance the generator by one step.

    Returns:
        A tuple of (value, new_state). Both are the same xorshift word.
    """
    s = state
    s = s ^ (s << 13)
    s = s ^ (s >> 17)
    s = s ^ (s << 5)
    return s, s


@ti.func
def random_float(state: ti.u32):
    """Draw a uniform double in [0, 1).

    Returns:
        A tuple of (value, new_state).
    """
    word, s = next_u32(state)
    return ti.cast(word, ti.f64) * _U32_SCALE, s


@ti.func
def random_range(state: ti.u32, lower: ti.f64, upper: ti.f64):
    """Draw a uniform double in [lower, upper).

    Returns:
        A tuple of (value, new_state).
    """
    u, s = random_float(state)
    return lower + (upper - lower) * u, s
