"""
Simulation package - Main simulation engine and runners.

Contains:
- Discrete-event simulator
- Batch runner for parameter sweeps
"""

from .simulator import Simulator, SimulatorConfig, EventType, SimEvent
from .runner import BatchRunner, RunConfig, run_single_simulation

__all__ = [
    'Simulator',
    'SimulatorConfig',
    'EventType',
    'SimEvent',
    'BatchRunner',
    'RunConfig',
    'run_single_simulation'
]
