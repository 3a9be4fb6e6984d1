"""
Timer for the Selective Repeat ARQ Sender

This module provides the single logical retransmission timer owned by
an endpoint. The timer does not keep time itself: it reads a clock and
asks its owner (the simulator) to deliver an interrupt at the expiry
time, tagged with a generation number so that interrupts belonging to a
stopped or restarted timer can be discarded.
"""

from enum import Enum
from typing import Callable, Optional

from ..utils.logger import SimulationLogger, get_logger


class TimerState(Enum):
    """Timer state enumeration."""
    STOPPED = 0
    RUNNING = 1


class SingleShotTimer:
    """
    One timer per endpoint, either stopped or armed for a fixed duration.
    
    Starting a running timer or stopping a stopped one is a usage error:
    it is logged, counted in misuse_count and otherwise ignored.
    
    Attributes:
        endpoint: Name used in log messages
        state: Current timer state
        start_time: Time when the timer was last started
        expiry_time: Absolute expiry time while running
        generation: Incremented on each start
        misuse_count: Number of rejected start/stop requests
    """
    
    def __init__(
        self,
        clock: Callable[[], float],
        on_start: Optional[Callable[[float, int], None]] = None,
        endpoint: str = "A",
        logger: Optional[SimulationLogger] = None
    ):
        """
        Initialize timer.
        
        Args:
            clock: Returns the current simulated time
            on_start: Called with (expiry_time, generation) on each start
            endpoint: Endpoint name for log messages
            logger: Logger (global logger if None)
        """
        self.clock = clock
        self.on_start = on_start
        self.endpoint = endpoint
        self.logger = logger or get_logger()
        
        self.state = TimerState.STOPPED
        self.start_time = 0.0
        self.expiry_time: Optional[float] = None
        self.generation = 0
        
        # Statistics
        self.starts = 0
        self.stops = 0
        self.expirations = 0
        self.misuse_count = 0
    
    @property
    def is_running(self) -> bool:
        return self.state == TimerState.RUNNING
    
    def start(self, duration: float):
        """
        Arm the timer.
        
        Args:
            duration: Time until expiry
        """
        if self.is_running:
            self.misuse_count += 1
            self.logger.warning(
                "attempt to start a timer that is already started", "TIMER"
            )
            return
        
        self.start_time = self.clock()
        self.expiry_time = self.start_time + duration
        self.state = TimerState.RUNNING
        self.generation += 1
        self.starts += 1
        self.logger.debug(
            f"{self.endpoint} timer started, expires at {self.expiry_time:.4f}",
            "TIMER"
        )
        
        if self.on_start:
            self.on_start(self.expiry_time, self.generation)
    
    def stop(self):
        """Disarm the timer."""
        if not self.is_running:
            self.misuse_count += 1
            self.logger.warning(
                "unable to cancel your timer. It wasn't running.", "TIMER"
            )
            return
        
        self.state = TimerState.STOPPED
        self.expiry_time = None
        self.stops += 1
        self.logger.debug(f"{self.endpoint} timer stopped", "TIMER")
    
    def expire(self, generation: int) -> bool:
        """
        Deliver an interrupt scheduled for the given generation.
        
        Args:
            generation: Generation the interrupt was scheduled for
            
        Returns:
            True if the timer was running that generation and has now
            expired; False for a stale interrupt
        """
        if not self.is_running or generation != self.generation:
            return False
        
        self.state = TimerState.STOPPED
        self.expiry_time = None
        self.expirations += 1
        return True
    
    def get_remaining_time(self) -> float:
        """Time until expiry (0 if stopped)."""
        if not self.is_running:
            return 0.0
        return max(0.0, self.expiry_time - self.clock())
    
    def get_statistics(self) -> dict:
        """Get timer statistics."""
        return {
            'timer_starts': self.starts,
            'timer_stops': self.stops,
            'timer_expirations': self.expirations,
            'timer_misuse': self.misuse_count
        }
