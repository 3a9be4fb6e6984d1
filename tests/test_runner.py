"""
Tests for the batch runner and the command line.
"""

import pandas as pd
import pytest

from sr_arq.simulation.runner import BatchRunner, RunConfig, run_single_simulation
from sr_arq.main import main, build_parser


class TestBatchRunner:
    """Tests for parameter sweeps."""
    
    @pytest.fixture
    def runner(self, tmp_path):
        return BatchRunner(
            loss_probs=[0.0, 0.2],
            corrupt_probs=[0.1],
            runs_per_config=2,
            num_messages=30,
            output_file=str(tmp_path / "out" / "results.csv")
        )
    
    def test_run_configs(self, runner):
        configs = runner._generate_run_configs()
        
        assert len(configs) == runner.total_runs == 4
        assert len({c.seed for c in configs}) == 4
    
    def test_sequential(self, runner):
        progress = []
        runner.on_progress = lambda done, total, result: progress.append(done)
        
        df = runner.run_sequential()
        
        assert isinstance(df, pd.DataFrame)
        assert len(df) == 4
        assert df['error'].isna().all()
        assert df['data_valid'].all()
        assert df['complete'].all()
        assert progress == [1, 2, 3, 4]
    
    def test_aggregated(self, runner):
        runner.run_sequential()
        
        aggregated = runner.get_aggregated_results()
        
        assert len(aggregated) == 2
        assert list(aggregated['runs']) == [2, 2]
        assert (aggregated['valid_fraction'] == 1.0).all()
        assert (aggregated['throughput_mean'] > 0).all()
    
    def test_save_results(self, runner, tmp_path):
        assert runner.save_results() is None
        
        runner.run_sequential()
        path = runner.save_results()
        
        saved = pd.read_csv(path)
        assert len(saved) == 4
        assert 'throughput' in saved.columns
    
    def test_failed_run_is_reported(self):
        result = run_single_simulation(RunConfig(
            loss_prob=1.5, corrupt_prob=0.0, run_id=0,
            seed=1, num_messages=5, mean_interval=10.0
        ))
        
        assert result['error']
        assert result['throughput'] == 0.0


class TestCommandLine:
    """Tests for the sr-arq entry point."""
    
    def test_mode_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])
    
    def test_modes_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(['--single', '--sweep'])
    
    def test_show_config(self, capsys):
        main(['--config'])
        
        out = capsys.readouterr().out
        assert "Window size: 6" in out
        assert "Sequence space: 12" in out
    
    def test_single(self, capsys):
        main(['--single', '--messages', '5', '--trace', '0'])
        
        out = capsys.readouterr().out
        assert "In-order delivery: True" in out
    
    def test_single_traced(self, capsys):
        main(['--single', '-n', '3', '--trace', '2', '--seed', '3'])
        
        out = capsys.readouterr().out
        assert "[A]" in out
        assert "[B]" in out
    
    def test_sweep(self, tmp_path, capsys):
        output = tmp_path / "sweep.csv"
        
        main(['--sweep', '--runs', '1', '--messages', '10',
              '--output', str(output)])
        
        assert output.exists()
        assert len(pd.read_csv(output)) == 16
