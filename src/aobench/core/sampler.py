"""Deterministic random streams for jittering and hemisphere sampling.

Taichi's built-in ``ti.random()`` keeps one generator state per hardware
thread, so the sequence a pixel sees depends on how the parallel loop is
scheduled. Rendering must be reproducible, so every pixel instead owns an
independent stream whose seed is a pure function of (base seed, pixel index).
No state is shared between pixels and nothing is synchronized on the hot path.

The generator is PCG-RXS-M-XS-32 (O'Neill, "PCG: A Family of Simple Fast
Space-Efficient Statistically Good Algorithms for Random Number Generation"):

    state' = state * 747796405 + 2891336453          (mod 2^32)
    word   = ((state' >> ((state' >> 28) + 4)) ^ state') * 277803737
    output = (word >> 22) ^ word

Floats take the top 24 bits of the output, giving values in [0, 1) that are
exactly representable in float32.

Device code threads the state explicitly:

    state = seed_stream(seed, pixel_index)
    u, state = next_float(state)

The host-side RandomStream produces bit-identical values, which makes the
device streams testable and gives Python code the same generator.

Example:
    >>> stream = RandomStream(seed=42)
    >>> values = [stream.next() for _ in range(3)]
    >>> all(0.0 <= v < 1.0 for v in values)
    True
    >>> RandomStream(seed=42).next() == values[0]
    True
"""

import taichi as ti

PCG_MULTIPLIER = 747796405
PCG_INCREMENT = 2891336453
PCG_OUTPUT_MULTIPLIER = 277803737

# PCG_INCREMENT does not fit in an i32 literal; kernels rebuild it from the
# same bit pattern interpreted as signed
_PCG_INCREMENT_SIGNED = PCG_INCREMENT - (1 << 32)

_MASK32 = 0xFFFFFFFF

# 2^-24: scales a 24-bit integer into [0, 1)
FLOAT_SCALE = 1.0 / 16777216.0


# =============================================================================
# Device Streams (Taichi functions)
# =============================================================================


@ti.func
def _pcg_permute(state: ti.u32) -> ti.u32:
    """Apply the RXS-M-XS output permutation to a state word."""
    shift = ti.bit_shr(state, ti.cast(28, ti.u32)) + ti.cast(4, ti.u32)
    word = (ti.bit_shr(state, shift) ^ state) * ti.cast(PCG_OUTPUT_MULTIPLIER, ti.u32)
    return ti.bit_shr(word, ti.cast(22, ti.u32)) ^ word


@ti.func
def _pcg_step(state: ti.u32) -> ti.u32:
    """Advance the LCG underlying the stream by one step."""
    increment = ti.bit_cast(ti.cast(_PCG_INCREMENT_SIGNED, ti.i32), ti.u32)
    return state * ti.cast(PCG_MULTIPLIER, ti.u32) + increment


@ti.func
def pcg_hash(value: ti.u32) -> ti.u32:
    """Hash a 32-bit value (one LCG step followed by the permutation)."""
    return _pcg_permute(_pcg_step(value))


@ti.func
def seed_stream(base_seed: ti.u32, unit_index: ti.i32) -> ti.u32:
    """Derive the initial state of an independent stream.

    Args:
        base_seed: The render's base seed.
        unit_index: Index of the parallel unit owning the stream (for the
            renderer, the linear pixel index).

    Returns:
        The stream's initial state.
    """
    return pcg_hash(ti.cast(unit_index, ti.u32) + pcg_hash(base_seed))


@ti.func
def next_float(state: ti.u32):
    """Draw the next uniform float from a stream.

    Args:
        state: The current stream state.

    Returns:
        A tuple (value, next_state) with value in [0, 1).
    """
    next_state = _pcg_step(state)
    word = _pcg_permute(next_state)
    value = ti.cast(ti.bit_shr(word, ti.cast(8, ti.u32)), ti.f32) * FLOAT_SCALE
    return value, next_state


# =============================================================================
# Host Streams
# =============================================================================


def _host_step(state: int) -> int:
    return (state * PCG_MULTIPLIER + PCG_INCREMENT) & _MASK32


def _host_permute(state: int) -> int:
    word = (((state >> ((state >> 28) + 4)) ^ state) * PCG_OUTPUT_MULTIPLIER) & _MASK32
    return (word >> 22) ^ word


def host_pcg_hash(value: int) -> int:
    """Host equivalent of pcg_hash()."""
    return _host_permute(_host_step(value & _MASK32))


def host_seed_stream(base_seed: int, unit_index: int) -> int:
    """Host equivalent of seed_stream()."""
    return host_pcg_hash((unit_index + host_pcg_hash(base_seed)) & _MASK32)


class RandomStream:
    """A stateful host-side stream, bit-identical to the device streams.

    Attributes:
        seed: The base seed the stream was derived from.
        unit_index: The parallel unit index the stream was derived for.
    """

    def __init__(self, seed: int, unit_index: int = 0) -> None:
        """Create the stream owned by ``unit_index`` under ``seed``.

        Args:
            seed: Base seed (any integer; reduced modulo 2^32).
            unit_index: Index of the unit owning the stream.
        """
        self.seed = seed
        self.unit_index = unit_index
        self._state = host_seed_stream(seed & _MASK32, unit_index)

    @property
    def state(self) -> int:
        """The current 32-bit state."""
        return self._state

    def next_u32(self) -> int:
        """Draw the next raw 32-bit output."""
        self._state = _host_step(self._state)
        return _host_permute(self._state)

    def next(self) -> float:
        """Draw the next uniform float in [0, 1)."""
        return (self.next_u32() >> 8) * FLOAT_SCALE

    def spawn(self, unit_index: int) -> "RandomStream":
        """Create the independent stream for another unit under the same seed."""
        return RandomStream(self.seed, unit_index)

    def __iter__(self):
        return self

    def __next__(self) -> float:
        return self.next()

    def __repr__(self) -> str:
        return f"RandomStream(seed={self.seed}, unit_index={self.unit_index})"
