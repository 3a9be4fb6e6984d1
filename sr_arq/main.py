#!/usr/bin/env python3
"""
Selective Repeat ARQ Simulator - Main Entry Point

This is the CLI interface for the protocol simulator.
It provides options for:
- Single emulated run
- Parameter sweep over loss and corruption probabilities
- Showing the configuration

Usage:
    sr-arq --single --messages 50 --loss 0.2 --corrupt 0.2 --trace 2
    sr-arq --sweep --runs 5
    sr-arq --config
"""

import argparse
import time

from . import config as cfg
from .simulation.simulator import Simulator, SimulatorConfig
from .simulation.runner import BatchRunner


def run_single_simulation(args):
    """Run a single simulation with specified parameters."""
    config = SimulatorConfig(
        num_messages=args.messages,
        loss_prob=args.loss,
        corrupt_prob=args.corrupt,
        mean_interval=args.mean_interval,
        trace=args.trace,
        seed=args.seed,
        log_file=args.log_file
    )
    
    print("=" * 60)
    print("SELECTIVE REPEAT ARQ SIMULATOR")
    print("=" * 60)
    print(f"\nConfiguration:")
    print(f"  Messages: {config.num_messages}")
    print(f"  Loss probability: {config.loss_prob}")
    print(f"  Corruption probability: {config.corrupt_prob}")
    print(f"  Mean message interval: {config.mean_interval}")
    print(f"  Window size: {config.window_size}, sequence space: {config.seq_space}")
    print(f"  Timeout: {config.timeout}")
    print(f"  Seed: {config.seed}")
    
    sim = Simulator(config)
    start_time = time.time()
    results = sim.run()
    elapsed = time.time() - start_time
    sim.close()
    
    metrics = results['metrics']
    verification = results['verification']
    
    print("\n" + "=" * 60)
    print("RESULTS")
    print("=" * 60)
    
    print(f"\nTransfer Status:")
    print(f"  Complete: {results['complete']}")
    print(f"  In-order delivery: {verification['valid']}")
    print(f"  Simulated time: {results['simulation_time']:.4f}")
    print(f"  Real time: {elapsed:.2f} s")
    
    print(f"\nSender (A):")
    print(f"  Messages from layer 5: {metrics['messages_generated']}")
    print(f"  Rejected, window full: {metrics['window_full']}")
    print(f"  Packets resent: {metrics['packets_resent']}")
    print(f"  ACKs received: {metrics['total_acks_received']}")
    print(f"  New ACKs: {metrics['new_acks']}")
    
    print(f"\nReceiver (B):")
    print(f"  Packets received: {metrics['packets_received']}")
    print(f"  Messages delivered to layer 5: {metrics['messages_delivered']}")
    
    print(f"\nChannel:")
    print(f"  Packets sent: {metrics['packets_sent']}")
    print(f"  Packets lost: {metrics['packets_lost']}")
    print(f"  Packets corrupted: {metrics['packets_corrupted']}")
    print(f"  Throughput: {metrics['throughput']:.5f} msg/unit")
    
    return results


def run_parameter_sweep(args):
    """Run a sweep over loss and corruption probabilities."""
    runner = BatchRunner(
        runs_per_config=args.runs,
        num_messages=args.messages,
        mean_interval=args.mean_interval,
        output_file=args.output or cfg.RESULTS_CSV,
        show_progress=True
    )
    
    print("=" * 60)
    print("PARAMETER SWEEP")
    print("=" * 60)
    print(f"\nConfiguration:")
    print(f"  Loss probabilities: {runner.loss_probs}")
    print(f"  Corruption probabilities: {runner.corrupt_probs}")
    print(f"  Runs per config: {runner.runs_per_config}")
    print(f"  Total simulations: {runner.total_runs}")
    print(f"  Messages per run: {runner.num_messages}")
    
    start = time.time()
    if args.parallel:
        runner.run_parallel(max_workers=args.workers)
    else:
        runner.run_sequential()
    print(f"\nCompleted {runner.total_runs} simulations in {time.time() - start:.1f}s")
    
    path = runner.save_results()
    if path:
        print(f"Results saved to: {path}")
    
    aggregated = runner.get_aggregated_results()
    if not aggregated.empty:
        print("\n" + aggregated.to_string(index=False))
    
    return runner.results


def show_config(args):
    """Display current configuration."""
    print("=" * 60)
    print("SIMULATOR CONFIGURATION")
    print("=" * 60)
    
    print(f"\nProtocol:")
    print(f"  Window size: {cfg.WINDOW_SIZE}")
    print(f"  Sequence space: {cfg.SEQ_SPACE}")
    print(f"  Timer duration: {cfg.RTT}")
    print(f"  Payload size: {cfg.PAYLOAD_SIZE} bytes")
    
    print(f"\nChannel:")
    print(f"  Delay: {cfg.MIN_CHANNEL_DELAY} + {cfg.CHANNEL_DELAY_SPREAD} * U(0,1)")
    print(f"  Mean idle delay: {cfg.calculate_mean_channel_delay()}")
    
    print(f"\nParameter Sweep:")
    print(f"  Loss probabilities: {cfg.LOSS_PROBS}")
    print(f"  Corruption probabilities: {cfg.CORRUPT_PROBS}")
    print(f"  Runs per config: {cfg.RUNS_PER_CONFIGURATION}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Selective Repeat ARQ Protocol Simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Single run with a noisy channel:
    sr-arq --single --messages 50 --loss 0.2 --corrupt 0.2 --trace 2

  Parameter sweep:
    sr-arq --sweep --runs 5

  Parallel parameter sweep:
    sr-arq --sweep --parallel --workers 4

  Show configuration:
    sr-arq --config
        """
    )
    
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument('--single', action='store_true',
                      help='Run single simulation')
    mode.add_argument('--sweep', action='store_true',
                      help='Run parameter sweep')
    mode.add_argument('--config', action='store_true',
                      help='Show configuration')
    
    parser.add_argument('--messages', '-n', type=int,
                        default=cfg.DEFAULT_NUM_MESSAGES,
                        help=f'Messages to simulate (default: {cfg.DEFAULT_NUM_MESSAGES})')
    parser.add_argument('--loss', type=float, default=cfg.DEFAULT_LOSS_PROB,
                        help='Packet loss probability')
    parser.add_argument('--corrupt', type=float, default=cfg.DEFAULT_CORRUPT_PROB,
                        help='Packet corruption probability')
    parser.add_argument('--lambda', dest='mean_interval', type=float,
                        default=cfg.DEFAULT_LAMBDA,
                        help='Average time between messages from layer 5')
    parser.add_argument('--trace', '-t', type=int, default=cfg.DEFAULT_TRACE,
                        help='Trace level: 0 quiet, 1 events, 2+ debug')
    parser.add_argument('--seed', '-s', type=int, default=cfg.RNG_SEED,
                        help=f'Random seed (default: {cfg.RNG_SEED})')
    parser.add_argument('--log-file', type=str,
                        help='Also write the trace to this file')
    
    parser.add_argument('--runs', '-r', type=int,
                        default=cfg.RUNS_PER_CONFIGURATION,
                        help=f'Runs per configuration (default: {cfg.RUNS_PER_CONFIGURATION})')
    parser.add_argument('--parallel', action='store_true',
                        help='Run simulations in parallel')
    parser.add_argument('--workers', type=int, default=None,
                        help='Number of parallel workers')
    parser.add_argument('--output', '-o', type=str,
                        help='Output CSV path')
    
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    
    if args.single:
        run_single_simulation(args)
    elif args.sweep:
        run_parameter_sweep(args)
    elif args.config:
        show_config(args)


if __name__ == "__main__":
    main()
