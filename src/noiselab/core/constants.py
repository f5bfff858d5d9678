"""Project-wide constants for the noise engine."""

import math

MIN_TABLE_SIZE = 16
MAX_TABLE_SIZE = 4096
DEFAULT_TABLE_SIZE = 256
DEFAULT_LOG2_SIZE = 8

DEFAULT_SEED = 42
SEED_MASK = 0xFFFFFFFF

DEFAULT_LACUNARITY = 0.5
DEFAULT_PERSISTENCE = 2.0
DEFAULT_OCTAVES = 4

# Perlin single-octave magnitude is bounded by 1/sqrt(2) with unit gradients
PERLIN_SCALE = math.sqrt(2.0)

NORMAL_MEAN = 500.0
NORMAL_STDDEV = 200.0
NORMAL_DIVISOR = 1000.0
EXPONENTIAL_RATE = 5.0
MIDPOINT_ENDPOINTS = (1.0, -1.0)
MIDPOINT_ROUGHNESS = 1.0

LCG_P0 = 73856093
LCG_P1 = 19349663
LCG_P2 = 83492791
LCG_SHIFT = 8

DEFAULT_RENDER_SIZE = 256
DEFAULT_RENDER_SCALE = 64.0
MAX_JUMP = 1 << 16

NOISE_KIND = "perlin"
HASH_KIND = "permutation"
SPLINE_KIND = "cubic"
DISTRIBUTION_KIND = "uniform"
ENCODING = "utf-8"
