"""
Configuration file for the Selective Repeat ARQ Simulator.
Contains the fixed protocol constants and the emulator defaults.
"""

import os

# =============================================================================
# PROTOCOL PARAMETERS
# =============================================================================

# Maximum number of buffered unacknowledged packets
WINDOW_SIZE = 6

# Sequence space; must be at least 2 * WINDOW_SIZE for Selective Repeat
SEQ_SPACE = 12

# Retransmission timer duration (simulated time units)
RTT = 15.0

# Filler for header fields that are not being used
NOT_IN_USE = -1

# Fixed message / payload size (bytes)
PAYLOAD_SIZE = 20

# Payload filler byte for pure acknowledgments
ACK_FILLER = b'0'

# =============================================================================
# ENDPOINTS
# =============================================================================

A = 0  # Sender
B = 1  # Receiver

# =============================================================================
# CHANNEL EMULATOR PARAMETERS
# =============================================================================

# One-way delay = MIN_CHANNEL_DELAY + CHANNEL_DELAY_SPREAD * U(0, 1),
# queued behind the last packet in flight on the same direction
MIN_CHANNEL_DELAY = 1.0
CHANNEL_DELAY_SPREAD = 9.0

# How a corrupted packet is damaged
P_CORRUPT_PAYLOAD = 0.75   # first payload byte overwritten with 'Z'
P_CORRUPT_SEQNUM = 0.125   # seqnum overwritten
# remaining probability overwrites acknum
CORRUPTED_FIELD = 999999

# =============================================================================
# SIMULATION DEFAULTS
# =============================================================================

DEFAULT_NUM_MESSAGES = 20
DEFAULT_LOSS_PROB = 0.0
DEFAULT_CORRUPT_PROB = 0.0
DEFAULT_LAMBDA = 10.0     # Mean time between messages from layer 5
DEFAULT_TRACE = 1

RNG_SEED = 42

# Failsafe on simulated time
MAX_SIMULATION_TIME = 1_000_000.0

# Logging verbosity levels
LOG_LEVEL_DEBUG = 0
LOG_LEVEL_INFO = 1
LOG_LEVEL_WARNING = 2
LOG_LEVEL_ERROR = 3

DEFAULT_LOG_LEVEL = LOG_LEVEL_INFO

# =============================================================================
# PARAMETER SWEEP CONFIGURATION
# =============================================================================

LOSS_PROBS = [0.0, 0.1, 0.2, 0.3]
CORRUPT_PROBS = [0.0, 0.1, 0.2, 0.3]
RUNS_PER_CONFIGURATION = 5
SWEEP_NUM_MESSAGES = 200

# =============================================================================
# OUTPUT PATHS
# =============================================================================

BASE_DIR = os.getcwd()
OUTPUT_DIR = os.path.join(BASE_DIR, "data", "output")
RESULTS_CSV = os.path.join(OUTPUT_DIR, "results.csv")

# =============================================================================
# DERIVED PARAMETERS
# =============================================================================

def trace_to_log_level(trace: int) -> int:
    """
    Map the emulator's TRACE setting onto a logger level.
    0 -> WARNING, 1 -> INFO, 2 and above -> DEBUG.
    """
    if trace <= 0:
        return LOG_LEVEL_WARNING
    if trace == 1:
        return LOG_LEVEL_INFO
    return LOG_LEVEL_DEBUG


def calculate_mean_channel_delay():
    """Mean one-way delay of an otherwise idle channel."""
    return MIN_CHANNEL_DELAY + CHANNEL_DELAY_SPREAD / 2
