"""
Simulation Logger

This module provides the trace output of the simulation,
with configurable verbosity levels and simulated-time stamps.
"""

from typing import Optional, TextIO
from datetime import datetime
from enum import IntEnum
import os

from ..config import DEFAULT_LOG_LEVEL


class LogLevel(IntEnum):
    """Log level enumeration."""
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3
    CRITICAL = 4


class SimulationLogger:
    """
    Logger for simulation events.
    
    Provides structured logging with timestamps and categories.
    
    Attributes:
        name: Logger name
        level: Minimum log level
        file: Optional file for logging
    """
    
    def __init__(
        self,
        name: str = "Simulator",
        level: int = DEFAULT_LOG_LEVEL,
        log_file: Optional[str] = None,
        include_timestamp: bool = True
    ):
        """
        Initialize logger.
        
        Args:
            name: Logger name
            level: Minimum log level
            log_file: Optional file path for logging
            include_timestamp: Include timestamps in log messages
        """
        self.name = name
        self.level = level
        self.include_timestamp = include_timestamp
        
        self.file: Optional[TextIO] = None
        if log_file:
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            self.file = open(log_file, 'w')
        
        # Simulated time of the event being handled
        self.sim_time: Optional[float] = None
        
        self.message_counts = {level: 0 for level in LogLevel}
    
    def set_sim_time(self, time: float):
        """Set current simulation time for log messages."""
        self.sim_time = time
    
    def set_level(self, level: int):
        """Set minimum log level."""
        self.level = level
    
    def _format_message(
        self,
        level: LogLevel,
        message: str,
        category: Optional[str] = None
    ) -> str:
        """Format a log message."""
        parts = []
        
        if self.include_timestamp:
            if self.sim_time is not None:
                parts.append(f"[{self.sim_time:10.4f}]")
            else:
                parts.append(f"[{datetime.now().strftime('%H:%M:%S.%f')[:-3]}]")
        
        parts.append(level.name.ljust(8))
        
        parts.append(f"[{self.name}]")
        
        if category:
            parts.append(f"[{category}]")
        
        parts.append(message)
        
        return " ".join(parts)
    
    def _log(
        self,
        level: LogLevel,
        message: str,
        category: Optional[str] = None
    ):
        """Log a message."""
        if level < self.level:
            return
        
        self.message_counts[level] += 1
        formatted = self._format_message(level, message, category)
        
        print(formatted)
        
        if self.file:
            self.file.write(formatted + '\n')
            self.file.flush()
    
    def debug(self, message: str, category: Optional[str] = None):
        """Log debug message."""
        self._log(LogLevel.DEBUG, message, category)
    
    def info(self, message: str, category: Optional[str] = None):
        """Log info message."""
        self._log(LogLevel.INFO, message, category)
    
    def warning(self, message: str, category: Optional[str] = None):
        """Log warning message."""
        self._log(LogLevel.WARNING, message, category)
    
    def error(self, message: str, category: Optional[str] = None):
        """Log error message."""
        self._log(LogLevel.ERROR, message, category)
    
    def critical(self, message: str, category: Optional[str] = None):
        """Log critical message."""
        self._log(LogLevel.CRITICAL, message, category)
    
    # Convenience methods for simulation events
    def packet_sent(self, endpoint: str, seqnum: int, acknum: int):
        """Log a packet handed to the channel."""
        self.debug(f"to layer 3: seq={seqnum} ack={acknum}", endpoint)
    
    def packet_lost(self, seqnum: int, acknum: int):
        """Log a packet dropped by the channel."""
        self.info(f"packet being lost (seq={seqnum} ack={acknum})", "CHANNEL")
    
    def packet_corrupted(self, seqnum: int, acknum: int):
        """Log a packet damaged by the channel."""
        self.info(f"packet being corrupted (seq={seqnum} ack={acknum})", "CHANNEL")
    
    def delivered(self, seqnum: int):
        """Log in-order delivery to layer 5."""
        self.debug(f"packet {seqnum} delivered to layer 5", "B")
    
    def window_update(self, first: int, last: int, count: int, acked: int):
        """Log sender window update."""
        self.debug(
            f"Window: first={first}, last={last}, "
            f"count={count}, acked={acked}",
            "WINDOW"
        )
    
    def simulation_start(self, params: dict):
        """Log simulation start."""
        param_str = ", ".join(f"{k}={v}" for k, v in params.items())
        self.info(f"Simulation started: {param_str}", "SIM")
    
    def simulation_end(self, metrics: dict):
        """Log simulation end."""
        self.info(
            f"Simulation ended: delivered={metrics.get('messages_delivered', 0)}, "
            f"throughput={metrics.get('throughput', 0):.4f} msg/unit",
            "SIM"
        )
    
    def get_summary(self) -> dict:
        """Get logging summary."""
        return {
            'message_counts': dict(self.message_counts),
            'total_messages': sum(self.message_counts.values())
        }
    
    def close(self):
        """Close log file if open."""
        if self.file:
            self.file.close()
            self.file = None
    
    def __del__(self):
        """Cleanup on deletion."""
        self.close()


# Global logger instance
_global_logger: Optional[SimulationLogger] = None


def get_logger() -> SimulationLogger:
    """Get global logger instance."""
    global _global_logger
    if _global_logger is None:
        _global_logger = SimulationLogger()
    return _global_logger


def set_logger(logger: SimulationLogger):
    """Set global logger instance."""
    global _global_logger
    _global_logger = logger
