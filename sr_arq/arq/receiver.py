"""
Selective Repeat ARQ Receiver

This module implements the receiver side of the Selective Repeat ARQ protocol,
including out-of-order buffering, per-packet acknowledgment and in-order
delivery to the application.
"""

from typing import Optional, List, Callable
from dataclasses import dataclass, field

from ..config import WINDOW_SIZE, SEQ_SPACE
from ..utils.logger import SimulationLogger, get_logger
from ..utils.metrics import MetricsCollector
from .packet import Packet, is_corrupted, make_ack_packet
from .seqspace import validate_spaces, next_seq, window_end, in_circular_range


@dataclass
class ReceiverState:
    """
    Reorder buffer for the receiver.
    
    Attributes:
        buffer: Circular buffer of WINDOW_SIZE slots starting at windowfirst
        expectedseqnum: Next sequence number deliverable to the application
        windowfirst: Buffer index of expectedseqnum
        nextseqnum: Sequence number stamped on the next ACK
    """
    window_size: int = WINDOW_SIZE
    seq_space: int = SEQ_SPACE
    buffer: List[Optional[Packet]] = field(init=False)
    expectedseqnum: int = 0
    windowfirst: int = 0
    nextseqnum: int = 1
    
    def __post_init__(self):
        validate_spaces(self.window_size, self.seq_space)
        self.buffer = [None] * self.window_size
    
    def in_window(self, seqnum: int) -> bool:
        """Check if seqnum lies in [expectedseqnum, expectedseqnum + W - 1]."""
        if not 0 <= seqnum < self.seq_space:
            return False
        last = window_end(self.expectedseqnum, self.window_size, self.seq_space)
        return in_circular_range(seqnum, self.expectedseqnum, last)
    
    def slot_index(self, seqnum: int) -> int:
        """Buffer index for an in-window seqnum, counted from windowfirst."""
        offset = (seqnum - self.expectedseqnum) % self.seq_space
        return (self.windowfirst + offset) % self.window_size
    
    def buffered(self) -> List[int]:
        """Sequence numbers held in the reorder buffer."""
        return sorted(p.seqnum for p in self.buffer if p is not None)


class SRReceiver:
    """
    Selective Repeat ARQ Receiver (endpoint B).
    
    Implements the receiver side of SR-ARQ with:
    - An ACK for every uncorrupted packet, in window or not
    - Out-of-order buffering within the receive window
    - In-order delivery of contiguous runs to the application
    
    Attributes:
        state: Receive window state, owned exclusively by this receiver
    """
    
    def __init__(
        self,
        to_layer3: Callable[[Packet], None],
        to_layer5: Callable[[bytes], None],
        metrics: Optional[MetricsCollector] = None,
        logger: Optional[SimulationLogger] = None,
        window_size: int = WINDOW_SIZE,
        seq_space: int = SEQ_SPACE
    ):
        """
        Initialize SR receiver.
        
        Args:
            to_layer3: Hands an ACK to the channel
            to_layer5: Delivers a payload to the application
            metrics: Reporting counters
            logger: Trace output (global logger if None)
            window_size: Receive window size
            seq_space: Size of the sequence space
        """
        validate_spaces(window_size, seq_space)
        self.window_size = window_size
        self.seq_space = seq_space
        
        self.to_layer3 = to_layer3
        self.to_layer5 = to_layer5
        self.metrics = metrics if metrics is not None else MetricsCollector()
        self.logger = logger or get_logger()
        
        self.state = ReceiverState(window_size=window_size, seq_space=seq_space)
    
    def init(self):
        """Reset the reorder buffer and sequence numbers."""
        self.state = ReceiverState(
            window_size=self.window_size,
            seq_space=self.seq_space
        )
    
    def on_packet_arrival(self, packet: Packet):
        """
        Process a data packet arriving from the channel.
        
        Args:
            packet: Received packet
        """
        if is_corrupted(packet):
            self.logger.info("corrupted packet is received, do nothing!", "B")
            return
        
        self.logger.info(
            f"packet {packet.seqnum} is correctly received, send ACK!", "B"
        )
        self.metrics.record_packet_received()
        self._send_ack(packet.seqnum)
        
        state = self.state
        if not state.in_window(packet.seqnum):
            self.logger.debug(
                f"packet {packet.seqnum} is outside the receive window", "B"
            )
            return
        
        state.buffer[state.slot_index(packet.seqnum)] = packet
        
        if packet.seqnum == state.expectedseqnum:
            self._deliver_in_order()
    
    def _send_ack(self, acknum: int):
        """Acknowledge acknum under the receiver's own sequence counter."""
        state = self.state
        ack = make_ack_packet(state.nextseqnum, acknum)
        state.nextseqnum = next_seq(state.nextseqnum, self.seq_space)
        self.to_layer3(ack)
    
    def _deliver_in_order(self):
        """Deliver the contiguous run starting at the buffer base."""
        state = self.state
        for _ in range(self.window_size):
            packet = state.buffer[state.windowfirst]
            if packet is None or packet.seqnum != state.expectedseqnum:
                break
            
            self.to_layer5(packet.payload)
            self.logger.delivered(packet.seqnum)
            
            state.buffer[state.windowfirst] = None
            state.windowfirst = (state.windowfirst + 1) % self.window_size
            state.expectedseqnum = next_seq(state.expectedseqnum, self.seq_space)
    
    def get_window_state(self) -> dict:
        """Get current window state."""
        state = self.state
        return {
            'expectedseqnum': state.expectedseqnum,
            'windowfirst': state.windowfirst,
            'nextseqnum': state.nextseqnum,
            'buffered': state.buffered()
        }
