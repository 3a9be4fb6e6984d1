"""
Sequence-number arithmetic over the finite sequence space.
"""

from ..config import WINDOW_SIZE, SEQ_SPACE


def validate_spaces(window_size: int = WINDOW_SIZE, seq_space: int = SEQ_SPACE):
    """
    Check that a window and sequence space can run Selective Repeat.
    
    Raises:
        ValueError: if the window is empty or seq_space < 2 * window_size
    """
    if window_size < 1:
        raise ValueError(f"Window size must be positive, got {window_size}")
    if seq_space < 2 * window_size:
        raise ValueError(
            f"Sequence space ({seq_space}) must be at least twice "
            f"the window size ({window_size})"
        )


def next_seq(seq: int, seq_space: int = SEQ_SPACE) -> int:
    """Successor of seq, wrapping back to 0."""
    return (seq + 1) % seq_space


def window_end(start: int, window_size: int = WINDOW_SIZE,
               seq_space: int = SEQ_SPACE) -> int:
    """Last sequence number of a window of window_size starting at start."""
    return (start + window_size - 1) % seq_space


def in_circular_range(value: int, first: int, last: int) -> bool:
    """
    Check whether value lies in the inclusive circular range [first, last].
    
    When first > last the range straddles the wraparound point, e.g.
    [10, 3] over a space of 12 holds 10, 11, 0, 1, 2, 3.
    """
    if first <= last:
        return first <= value <= last
    return value >= first or value <= last
