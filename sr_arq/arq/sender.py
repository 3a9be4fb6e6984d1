"""
Selective Repeat ARQ Sender

This module implements the sender side of the Selective Repeat ARQ protocol:
sliding window management over a circular buffer, acknowledgment
processing, and timeout-driven retransmission of the oldest
unacknowledged packet.
"""

from typing import Optional, List, Callable
from dataclasses import dataclass, field

from ..config import WINDOW_SIZE, SEQ_SPACE, RTT
from ..utils.logger import SimulationLogger, get_logger
from ..utils.metrics import MetricsCollector
from .packet import Packet, is_corrupted, make_data_packet
from .seqspace import validate_spaces, next_seq, in_circular_range
from .timer import SingleShotTimer


@dataclass
class WindowSlot:
    """A transmitted packet and whether it has been acknowledged."""
    packet: Packet
    acked: bool = False


@dataclass
class SenderState:
    """
    Sliding window for the sender.
    
    Attributes:
        slots: Circular buffer of WINDOW_SIZE slots
        windowfirst: Index of the oldest outstanding packet
        windowlast: Index of the most recently inserted packet
        windowcount: Packets in the buffer not yet acknowledged
        ackcount: Acknowledged packets not yet slid out
        nextseqnum: Next sequence number to assign
    """
    window_size: int = WINDOW_SIZE
    seq_space: int = SEQ_SPACE
    slots: List[Optional[WindowSlot]] = field(init=False)
    windowfirst: int = 0
    windowlast: int = -1
    windowcount: int = 0
    ackcount: int = 0
    nextseqnum: int = 0
    
    def __post_init__(self):
        validate_spaces(self.window_size, self.seq_space)
        self.slots = [None] * self.window_size
    
    @property
    def occupied(self) -> int:
        """Slots holding packets that have not been slid out."""
        return self.windowcount + self.ackcount
    
    @property
    def is_full(self) -> bool:
        return self.occupied >= self.window_size
    
    def slot_index(self, seqnum: int) -> int:
        """
        Buffer index of the slot holding seqnum.
        
        Slots are filled in sequence order from windowfirst, so the index
        is the distance of seqnum from the oldest buffered packet. The
        buffer must not be empty.
        """
        offset = (seqnum - self.first_seq()) % self.seq_space
        return (self.windowfirst + offset) % self.window_size
    
    def first_seq(self) -> int:
        return self.slots[self.windowfirst].packet.seqnum
    
    def last_seq(self) -> int:
        return self.slots[self.windowlast].packet.seqnum


class SRSender:
    """
    Selective Repeat ARQ Sender (endpoint A).
    
    Implements the sender side of SR-ARQ with:
    - A fixed circular window of WINDOW_SIZE slots
    - Wraparound-safe classification of acknowledgments
    - A single retransmission timer covering the oldest
      unacknowledged packet
    
    Messages offered while the window is full are dropped, not queued.
    
    Attributes:
        state: Window state, owned exclusively by this sender
        timer: Retransmission timer
        timeout: Timer duration
    """
    
    def __init__(
        self,
        timer: SingleShotTimer,
        to_layer3: Callable[[Packet], None],
        metrics: Optional[MetricsCollector] = None,
        logger: Optional[SimulationLogger] = None,
        window_size: int = WINDOW_SIZE,
        seq_space: int = SEQ_SPACE,
        timeout: float = RTT
    ):
        """
        Initialize SR sender.
        
        Args:
            timer: Single retransmission timer
            to_layer3: Hands a packet to the channel
            metrics: Reporting counters
            logger: Trace output (global logger if None)
            window_size: Send window size
            seq_space: Size of the sequence space
            timeout: Timer duration
        """
        validate_spaces(window_size, seq_space)
        self.window_size = window_size
        self.seq_space = seq_space
        self.timeout = timeout
        
        self.timer = timer
        self.to_layer3 = to_layer3
        self.metrics = metrics if metrics is not None else MetricsCollector()
        self.logger = logger or get_logger()
        
        self.state = SenderState(window_size=window_size, seq_space=seq_space)
    
    def init(self):
        """Reset the window, sequence numbers and counts."""
        self.state = SenderState(
            window_size=self.window_size,
            seq_space=self.seq_space
        )
    
    def submit(self, message: bytes) -> bool:
        """
        Offer a message from the application.
        
        Args:
            message: PAYLOAD_SIZE-byte message
            
        Returns:
            True if sent, False if dropped because the window is full
        """
        state = self.state
        
        if state.is_full:
            self.logger.info("New message arrives, send window is full", "A")
            self.metrics.record_window_full()
            return False
        
        self.logger.debug(
            "New message arrives, send window is not full, "
            "send new message to layer 3", "A"
        )
        
        packet = make_data_packet(state.nextseqnum, message)
        
        state.windowlast = (state.windowlast + 1) % self.window_size
        state.slots[state.windowlast] = WindowSlot(packet=packet)
        state.windowcount += 1
        
        self.logger.info(f"Sending packet {packet.seqnum} to layer 3", "A")
        self.to_layer3(packet)
        
        if state.windowcount == 1:
            self.timer.start(self.timeout)
        
        state.nextseqnum = next_seq(state.nextseqnum, self.seq_space)
        return True
    
    def on_packet_arrival(self, packet: Packet):
        """
        Process a packet arriving from the channel (always an ACK).
        
        Args:
            packet: Received packet
        """
        if is_corrupted(packet):
            self.logger.info("corrupted ACK is received, do nothing!", "A")
            return
        
        self.logger.info(f"uncorrupted ACK {packet.acknum} is received", "A")
        self.metrics.record_ack_received()
        
        if not self._is_new_ack(packet.acknum):
            self.logger.info("duplicate ACK received, do nothing!", "A")
            return
        
        state = self.state
        slot = state.slots[state.slot_index(packet.acknum)]
        slot.acked = True
        state.ackcount += 1
        state.windowcount -= 1
        self.metrics.record_new_ack()
        self.logger.info(f"ACK {packet.acknum} is not a duplicate", "A")
        
        if packet.acknum == state.first_seq():
            self._slide_window()
        
        self.timer.stop()
        if state.windowcount >= 1:
            self.timer.start(self.timeout)
        
        self.logger.window_update(
            state.windowfirst, state.windowlast,
            state.windowcount, state.ackcount
        )
    
    def on_timeout(self):
        """Resend the oldest unacknowledged packet and re-arm the timer."""
        self.logger.info("time out, resend packets!", "A")
        
        slot = self._oldest_unacked()
        if slot is None:
            return
        
        self.logger.info(f"resending packet {slot.packet.seqnum}", "A")
        self.to_layer3(slot.packet)
        self.metrics.record_retransmission()
        self.timer.start(self.timeout)
    
    def _is_new_ack(self, acknum: int) -> bool:
        """
        Check that acknum names an outstanding, not yet acknowledged packet.
        
        The window spans [seqfirst, seqlast], which may straddle the
        wraparound point.
        """
        state = self.state
        if state.windowcount == 0:
            return False
        if not 0 <= acknum < self.seq_space:
            return False
        if not in_circular_range(acknum, state.first_seq(), state.last_seq()):
            return False
        return not state.slots[state.slot_index(acknum)].acked
    
    def _slide_window(self):
        """Slide the window forward past consecutive acknowledged packets."""
        state = self.state
        while state.ackcount > 0:
            slot = state.slots[state.windowfirst]
            if slot is None or not slot.acked:
                break
            state.slots[state.windowfirst] = None
            state.windowfirst = (state.windowfirst + 1) % self.window_size
            state.ackcount -= 1
    
    def _oldest_unacked(self) -> Optional[WindowSlot]:
        """First unacknowledged slot scanning from windowfirst."""
        state = self.state
        for offset in range(state.occupied):
            slot = state.slots[(state.windowfirst + offset) % self.window_size]
            if slot is not None and not slot.acked:
                return slot
        return None
    
    def get_outstanding(self) -> List[int]:
        """Sequence numbers of unacknowledged packets, oldest first."""
        state = self.state
        outstanding = []
        for offset in range(state.occupied):
            slot = state.slots[(state.windowfirst + offset) % self.window_size]
            if slot is not None and not slot.acked:
                outstanding.append(slot.packet.seqnum)
        return outstanding
    
    def get_window_state(self) -> dict:
        """Get current window state."""
        state = self.state
        return {
            'windowfirst': state.windowfirst,
            'windowlast': state.windowlast,
            'windowcount': state.windowcount,
            'ackcount': state.ackcount,
            'nextseqnum': state.nextseqnum,
            'outstanding': self.get_outstanding(),
            'timer_running': self.timer.is_running
        }
