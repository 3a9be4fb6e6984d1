"""
Batch Runner for Parameter Sweep Simulations

This module runs the simulator over a grid of loss and corruption
probabilities, several seeded runs per point, and collects the results
into a pandas DataFrame.
"""

import os
import time
from typing import Optional, Callable, List, Dict
from dataclasses import dataclass
from concurrent.futures import ProcessPoolExecutor, as_completed
import multiprocessing

import pandas as pd
from tqdm import tqdm

from ..config import (
    LOSS_PROBS, CORRUPT_PROBS, RUNS_PER_CONFIGURATION,
    SWEEP_NUM_MESSAGES, DEFAULT_LAMBDA, RNG_SEED, RESULTS_CSV
)
from .simulator import Simulator, SimulatorConfig


@dataclass
class RunConfig:
    """Configuration for a single simulation run."""
    loss_prob: float
    corrupt_prob: float
    run_id: int
    seed: int
    num_messages: int
    mean_interval: float


def run_single_simulation(run_config: RunConfig) -> Dict:
    """
    Run a single simulation with given configuration.
    
    This function is designed to be called in a separate process.
    
    Args:
        run_config: Configuration for this run
        
    Returns:
        Dictionary with results
    """
    try:
        config = SimulatorConfig(
            num_messages=run_config.num_messages,
            loss_prob=run_config.loss_prob,
            corrupt_prob=run_config.corrupt_prob,
            mean_interval=run_config.mean_interval,
            seed=run_config.seed,
            trace=0  # Warnings only for batch runs
        )
        
        sim = Simulator(config)
        results = sim.run()
        sim.close()
        
        metrics = results['metrics']
        
        return {
            'loss_prob': run_config.loss_prob,
            'corrupt_prob': run_config.corrupt_prob,
            'run_id': run_config.run_id,
            'seed': run_config.seed,
            'throughput': metrics['throughput'],
            'retransmission_rate': metrics['retransmission_rate'],
            'acceptance_rate': metrics['acceptance_rate'],
            'messages_accepted': metrics['messages_accepted'],
            'messages_delivered': metrics['messages_delivered'],
            'window_full': metrics['window_full'],
            'packets_resent': metrics['packets_resent'],
            'new_acks': metrics['new_acks'],
            'total_acks_received': metrics['total_acks_received'],
            'timeouts': metrics['timeouts'],
            'total_time': results['simulation_time'],
            'data_valid': results['verification']['valid'],
            'complete': results['complete'],
            'error': None
        }
        
    except Exception as e:
        return {
            'loss_prob': run_config.loss_prob,
            'corrupt_prob': run_config.corrupt_prob,
            'run_id': run_config.run_id,
            'seed': run_config.seed,
            'throughput': 0.0,
            'error': str(e)
        }


class BatchRunner:
    """
    Batch Runner for parameter sweep simulations.
    
    Executes all (loss, corruption) combinations with multiple runs each.
    
    Attributes:
        loss_probs: Loss probabilities to test
        corrupt_probs: Corruption probabilities to test
        runs_per_config: Number of runs per configuration
        num_messages: Messages generated per run
    """
    
    def __init__(
        self,
        loss_probs: List[float] = None,
        corrupt_probs: List[float] = None,
        runs_per_config: int = RUNS_PER_CONFIGURATION,
        num_messages: int = SWEEP_NUM_MESSAGES,
        mean_interval: float = DEFAULT_LAMBDA,
        output_file: str = RESULTS_CSV,
        on_progress: Optional[Callable[[int, int, dict], None]] = None,
        show_progress: bool = False
    ):
        """
        Initialize batch runner.
        
        Args:
            loss_probs: Loss probabilities (default from config)
            corrupt_probs: Corruption probabilities (default from config)
            runs_per_config: Number of runs per (loss, corrupt) pair
            num_messages: Messages generated per run
            mean_interval: Mean time between messages
            output_file: Path to output CSV file
            on_progress: Callback for progress updates
            show_progress: Show a tqdm progress bar
        """
        self.loss_probs = loss_probs if loss_probs is not None else LOSS_PROBS
        self.corrupt_probs = corrupt_probs if corrupt_probs is not None else CORRUPT_PROBS
        self.runs_per_config = runs_per_config
        self.num_messages = num_messages
        self.mean_interval = mean_interval
        self.output_file = output_file
        self.on_progress = on_progress
        self.show_progress = show_progress

        self.results = pd.DataFrame()
        
        self.total_runs = (len(self.loss_probs) *
                           len(self.corrupt_probs) *
                           self.runs_per_config)
        self.completed_runs = 0
        self.start_time = 0.0
    
    def _generate_run_configs(self) -> List[RunConfig]:
        """Generate all run configurations."""
        configs = []
        
        for i, loss_prob in enumerate(self.loss_probs):
            for j, corrupt_prob in enumerate(self.corrupt_probs):
                for run_id in range(self.runs_per_config):
                    # Unique seed for each run
                    seed = RNG_SEED + i * 1000 + j * 100 + run_id
                    
                    configs.append(RunConfig(
                        loss_prob=loss_prob,
                        corrupt_prob=corrupt_prob,
                        run_id=run_id,
                        seed=seed,
                        num_messages=self.num_messages,
                        mean_interval=self.mean_interval
                    ))
        
        return configs
    
    def _record(self, rows: List[Dict], result: Dict):
        rows.append(result)
        self.completed_runs += 1
        if self.on_progress:
            self.on_progress(self.completed_runs, self.total_runs, result)
    
    def run_sequential(self) -> pd.DataFrame:
        """
        Run all simulations sequentially.
        
        Returns:
            DataFrame with one row per run
        """
        rows: List[Dict] = []
        self.completed_runs = 0
        self.start_time = time.time()
        
        configs = self._generate_run_configs()
        iterator = tqdm(configs, desc="Simulations", disable=not self.show_progress)

        for config in iterator:
            self._record(rows, run_single_simulation(config))
        
        self.results = pd.DataFrame(rows)
        return self.results
    
    def run_parallel(self, max_workers: Optional[int] = None) -> pd.DataFrame:
        """
        Run simulations in parallel using multiprocessing.
        
        Args:
            max_workers: Number of parallel workers (default: CPU count)
            
        Returns:
            DataFrame with one row per run
        """
        if max_workers is None:
            max_workers = multiprocessing.cpu_count()
        
        rows: List[Dict] = []
        self.completed_runs = 0
        self.start_time = time.time()
        
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            futures = [
                executor.submit(run_single_simulation, config)
                for config in self._generate_run_configs()
            ]
            iterator = tqdm(as_completed(futures), total=len(futures),
                            desc="Simulations", disable=not self.show_progress)
            for future in iterator:
                self._record(rows, future.result())
        
        self.results = (pd.DataFrame(rows)
                        .sort_values(['loss_prob', 'corrupt_prob', 'run_id'])
                        .reset_index(drop=True))
        return self.results
    
    def save_results(self, filepath: Optional[str] = None) -> Optional[str]:
        """
        Save results to CSV file.
        
        Args:
            filepath: Output file path (default: self.output_file)
            
        Returns:
            Path written, or None if there is nothing to save
        """
        filepath = filepath or self.output_file
        
        if self.results.empty:
            return None
        
        out_dir = os.path.dirname(filepath)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        
        self.results.to_csv(filepath, index=False)
        return filepath
    
    def get_aggregated_results(self) -> pd.DataFrame:
        """
        Get aggregated results by (loss, corrupt) pair.
        
        Returns:
            DataFrame of means, plus the throughput standard deviation
            and the fraction of runs whose delivery verified
        """
        if self.results.empty:
            return pd.DataFrame()
        
        ok = self.results[self.results['error'].isna()]
        if ok.empty:
            return pd.DataFrame()
        
        grouped = ok.groupby(['loss_prob', 'corrupt_prob'])
        return grouped.agg(
            throughput_mean=('throughput', 'mean'),
            throughput_std=('throughput', 'std'),
            retransmission_rate_mean=('retransmission_rate', 'mean'),
            acceptance_rate_mean=('acceptance_rate', 'mean'),
            window_full_mean=('window_full', 'mean'),
            valid_fraction=('data_valid', 'mean'),
            runs=('run_id', 'count')
        ).reset_index()
