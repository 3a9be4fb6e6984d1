"""
ARQ package - Selective Repeat ARQ protocol components.

Contains implementations for:
- Packet structure and checksum
- Sequence-number arithmetic
- Sender with circular window management
- Receiver with out-of-order buffering
- Single retransmission timer
"""

from .packet import Packet, compute_checksum, is_corrupted, make_data_packet, make_ack_packet
from .seqspace import next_seq, in_circular_range, window_end, validate_spaces
from .sender import SRSender, SenderState, WindowSlot
from .receiver import SRReceiver, ReceiverState
from .timer import SingleShotTimer, TimerState

__all__ = [
    'Packet',
    'compute_checksum',
    'is_corrupted',
    'make_data_packet',
    'make_ack_packet',
    'next_seq',
    'in_circular_range',
    'window_end',
    'validate_spaces',
    'SRSender',
    'SenderState',
    'WindowSlot',
    'SRReceiver',
    'ReceiverState',
    'SingleShotTimer',
    'TimerState'
]
