"""
Main Simulator - Event-Driven Network Emulation

This module implements the discrete-event loop that drives the sender and
receiver engines with the three external event kinds: a message from the
application, a packet arriving from the channel, and a timer interrupt.
"""

from typing import Optional, Dict, List
from dataclasses import dataclass, field
from enum import Enum
import heapq
import itertools
import time

import numpy as np

from ..config import (
    A, B, WINDOW_SIZE, SEQ_SPACE, RTT,
    DEFAULT_NUM_MESSAGES, DEFAULT_LOSS_PROB, DEFAULT_CORRUPT_PROB,
    DEFAULT_LAMBDA, DEFAULT_TRACE, RNG_SEED, MAX_SIMULATION_TIME,
    trace_to_log_level
)
from ..arq.packet import Packet
from ..arq.sender import SRSender
from ..arq.receiver import SRReceiver
from ..arq.timer import SingleShotTimer
from ..arq.seqspace import validate_spaces
from ..channel.emulator import LossyChannel
from ..layers.application import MessageGenerator, DeliveryVerifier
from ..utils.metrics import MetricsCollector
from ..utils.logger import SimulationLogger


class EventType(Enum):
    """Types of simulation events."""
    FROM_LAYER5 = 0       # Application hands a message to the sender
    FROM_LAYER3 = 1       # Packet arrives at an endpoint
    TIMER_INTERRUPT = 2   # Endpoint timer expires


@dataclass(order=True)
class SimEvent:
    """Simulation event; ties on time are broken by scheduling order."""
    time: float
    order: int
    event_type: EventType = field(compare=False)
    endpoint: int = field(compare=False, default=A)
    data: dict = field(compare=False, default_factory=dict)


@dataclass
class SimulatorConfig:
    """Configuration for the simulator."""
    num_messages: int = DEFAULT_NUM_MESSAGES
    loss_prob: float = DEFAULT_LOSS_PROB
    corrupt_prob: float = DEFAULT_CORRUPT_PROB
    mean_interval: float = DEFAULT_LAMBDA
    trace: int = DEFAULT_TRACE
    seed: int = RNG_SEED
    
    # Protocol parameters
    window_size: int = WINDOW_SIZE
    seq_space: int = SEQ_SPACE
    timeout: float = RTT
    
    # Failsafes
    max_time: float = MAX_SIMULATION_TIME
    max_events: int = 10_000_000
    
    log_file: Optional[str] = None
    
    def __post_init__(self):
        if self.num_messages < 0:
            raise ValueError("Number of messages must be non-negative")
        if self.timeout <= 0:
            raise ValueError("Timeout must be positive")
        validate_spaces(self.window_size, self.seq_space)


class Simulator:
    """
    Main Event-Driven Simulator.
    
    Wires one sender (A) and one receiver (B) to a pair of
    one-directional channels and a single timer for A.
    """
    
    def __init__(self, config: SimulatorConfig):
        """Initialize simulator."""
        self.config = config
        
        self.logger = SimulationLogger(
            name="SR",
            level=trace_to_log_level(config.trace),
            log_file=config.log_file
        )
        self.metrics = MetricsCollector()
        self.verifier = DeliveryVerifier()
        
        self.current_time = 0.0
        self.event_queue: List[SimEvent] = []
        self._order = itertools.count()
        
        # Created by run() from config.seed, so repeated runs repeat exactly
        self.generator: Optional[MessageGenerator] = None
        self.channels: Dict[int, LossyChannel] = {}
        self.timer: Optional[SingleShotTimer] = None
        self.sender: Optional[SRSender] = None
        self.receiver: Optional[SRReceiver] = None
    
    def _build(self, seed: int):
        """Create the channels, application source and engines."""
        config = self.config
        app_seq, forward_seq, reverse_seq = np.random.SeedSequence(seed).spawn(3)
        
        self.generator = MessageGenerator(
            mean_interval=config.mean_interval,
            rng=np.random.default_rng(app_seq)
        )
        self.channels = {
            B: LossyChannel(
                config.loss_prob, config.corrupt_prob,
                rng=np.random.default_rng(forward_seq),
                metrics=self.metrics, logger=self.logger
            ),
            A: LossyChannel(
                config.loss_prob, config.corrupt_prob,
                rng=np.random.default_rng(reverse_seq),
                metrics=self.metrics, logger=self.logger
            )
        }
        
        self.timer = SingleShotTimer(
            clock=lambda: self.current_time,
            on_start=self._schedule_timer_interrupt,
            endpoint="A",
            logger=self.logger
        )
        self.sender = SRSender(
            timer=self.timer,
            to_layer3=lambda packet: self._to_layer3(A, packet),
            metrics=self.metrics,
            logger=self.logger,
            window_size=config.window_size,
            seq_space=config.seq_space,
            timeout=config.timeout
        )
        self.receiver = SRReceiver(
            to_layer3=lambda packet: self._to_layer3(B, packet),
            to_layer5=self._to_layer5,
            metrics=self.metrics,
            logger=self.logger,
            window_size=config.window_size,
            seq_space=config.seq_space
        )
    
    def _schedule_event(self, time: float, event_type: EventType,
                        endpoint: int = A, data: dict = None):
        """Schedule an event."""
        event = SimEvent(
            time=time,
            order=next(self._order),
            event_type=event_type,
            endpoint=endpoint,
            data=data or {}
        )
        heapq.heappush(self.event_queue, event)
    
    def _schedule_timer_interrupt(self, expiry_time: float, generation: int):
        self._schedule_event(
            expiry_time, EventType.TIMER_INTERRUPT, A,
            {'generation': generation}
        )
    
    def _to_layer3(self, source: int, packet: Packet):
        """Hand a packet from source to the channel towards the other side."""
        destination = B if source == A else A
        self.logger.packet_sent("A" if source == A else "B",
                                packet.seqnum, packet.acknum)
        
        result = self.channels[destination].transmit(packet, self.current_time)
        if result is None:
            return
        
        arrival_time, in_flight = result
        self._schedule_event(
            arrival_time, EventType.FROM_LAYER3, destination,
            {'packet': in_flight}
        )
    
    def _to_layer5(self, payload: bytes):
        """Receiver delivers a message to the application."""
        self.verifier.record_delivered(payload)
        self.metrics.record_message_delivered()
    
    def _handle_from_layer5(self):
        message = self.generator.next_message()
        accepted = self.sender.submit(message)
        self.metrics.record_message_generated(accepted)
        if accepted:
            self.verifier.record_accepted(message)
        
        if self.generator.count < self.config.num_messages:
            self._schedule_event(
                self.current_time + self.generator.next_interval(),
                EventType.FROM_LAYER5
            )
    
    def _handle_from_layer3(self, event: SimEvent):
        packet = event.data['packet']
        if event.endpoint == A:
            self.sender.on_packet_arrival(packet)
        else:
            self.receiver.on_packet_arrival(packet)
    
    def _handle_timer_interrupt(self, event: SimEvent):
        if not self.timer.expire(event.data['generation']):
            return
        self.metrics.record_timeout()
        self.sender.on_timeout()
    
    def _is_complete(self) -> bool:
        """All messages generated and every accepted one delivered."""
        return (self.generator.count >= self.config.num_messages and
                self.metrics.messages_delivered >= self.metrics.messages_accepted and
                not self.timer.is_running)
    
    def run(self) -> Dict:
        """Run the simulation."""
        config = self.config
        
        self.event_queue.clear()
        self.current_time = 0.0
        self.metrics.reset()
        self.verifier.reset()
        self._build(config.seed)

        self.logger.set_sim_time(0.0)
        self.logger.simulation_start({
            'messages': config.num_messages,
            'loss': config.loss_prob,
            'corrupt': config.corrupt_prob,
            'lambda': config.mean_interval,
            'window': config.window_size,
            'seq_space': config.seq_space
        })
        self.metrics.start(0.0)
        sim_start_real = time.time()
        
        if config.num_messages > 0:
            self._schedule_event(self.generator.next_interval(), EventType.FROM_LAYER5)
        
        events = 0
        while self.event_queue and events < config.max_events:
            event = heapq.heappop(self.event_queue)
            if event.time > config.max_time:
                self.logger.warning(
                    f"simulated time limit {config.max_time} reached", "SIM"
                )
                break
            
            self.current_time = event.time
            self.logger.set_sim_time(event.time)
            
            if event.event_type == EventType.FROM_LAYER5:
                self._handle_from_layer5()
            elif event.event_type == EventType.FROM_LAYER3:
                self._handle_from_layer3(event)
            elif event.event_type == EventType.TIMER_INTERRUPT:
                self._handle_timer_interrupt(event)
            
            events += 1
        
        self.metrics.finish(self.current_time)
        sim_end_real = time.time()
        
        valid, verify_details = self.verifier.verify()
        summary = self.metrics.get_summary()
        self.logger.simulation_end(summary)
        
        return {
            'config': {
                'num_messages': config.num_messages,
                'loss_prob': config.loss_prob,
                'corrupt_prob': config.corrupt_prob,
                'mean_interval': config.mean_interval,
                'window_size': config.window_size,
                'seq_space': config.seq_space,
                'timeout': config.timeout,
                'seed': config.seed
            },
            'metrics': summary,
            'timer': self.timer.get_statistics(),
            'verification': {'valid': valid, **verify_details},
            'events': events,
            'real_time': sim_end_real - sim_start_real,
            'simulation_time': self.current_time,
            'complete': self._is_complete()
        }
    
    def close(self):
        self.logger.close()
