"""
Tests for configuration helpers, metrics and the trace logger.
"""

import pytest

from sr_arq import config
from sr_arq.utils import MetricsCollector, SimulationLogger, LogLevel


class TestConfig:
    
    @pytest.mark.parametrize("trace,level", [
        (0, LogLevel.WARNING),
        (1, LogLevel.INFO),
        (2, LogLevel.DEBUG),
        (5, LogLevel.DEBUG),
    ])
    def test_trace_levels(self, trace, level):
        assert config.trace_to_log_level(trace) == level
    
    def test_mean_channel_delay(self):
        assert config.calculate_mean_channel_delay() == pytest.approx(5.5)
    
    def test_spaces_consistent(self):
        assert config.SEQ_SPACE >= 2 * config.WINDOW_SIZE


class TestMetricsCollector:
    
    def test_counters(self):
        m = MetricsCollector()
        m.record_message_generated(accepted=True)
        m.record_message_generated(accepted=False)
        m.record_window_full()
        m.record_ack_received()
        m.record_new_ack()
        m.record_retransmission()
        
        counters = m.get_counters()
        assert counters['messages_generated'] == 2
        assert counters['messages_accepted'] == 1
        assert counters['window_full'] == 1
        assert counters['total_acks_received'] == 1
        assert counters['new_acks'] == 1
        assert m.calculate_acceptance_rate() == 0.5
        assert m.calculate_retransmission_rate() == 1.0
    
    def test_throughput(self):
        m = MetricsCollector()
        assert m.calculate_throughput() == 0.0
        
        m.start(0.0)
        for _ in range(5):
            m.record_message_delivered()
        m.finish(50.0)
        
        assert m.total_time == 50.0
        assert m.calculate_throughput() == pytest.approx(0.1)
    
    def test_csv_row_and_reset(self):
        m = MetricsCollector()
        m.start(0.0)
        m.record_timeout()
        m.finish(10.0)
        
        row = m.to_csv_row()
        assert 'start_time' not in row
        assert row['timeouts'] == 1
        
        m.reset()
        assert m.timeouts == 0
        assert m.start_time is None


class TestSimulationLogger:
    
    def test_category_and_sim_time(self, capsys):
        logger = SimulationLogger(name="SR", level=LogLevel.DEBUG)
        logger.set_sim_time(12.5)
        logger.info("window full", "A")
        
        out = capsys.readouterr().out
        assert "[   12.5000]" in out
        assert "[SR]" in out
        assert "[A]" in out
        assert "window full" in out
    
    def test_level_filter(self, capsys):
        logger = SimulationLogger(level=LogLevel.WARNING)
        logger.info("hidden")
        logger.warning("shown")
        
        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out
        assert logger.get_summary()['message_counts'][LogLevel.WARNING] == 1
    
    def test_log_file(self, tmp_path, capsys):
        path = tmp_path / "logs" / "trace.log"
        logger = SimulationLogger(level=LogLevel.DEBUG, log_file=str(path))
        logger.set_sim_time(4.0)
        logger.delivered(3)
        logger.close()
        
        printed = capsys.readouterr().out
        assert path.read_text() == printed
        assert "packet 3 delivered to layer 5" in printed
    
    def test_without_timestamp(self, capsys):
        logger = SimulationLogger(name="SR", level=LogLevel.INFO,
                                  include_timestamp=False)
        logger.set_sim_time(9.0)
        logger.info("plain", "B")
        
        assert capsys.readouterr().out == "INFO     [SR] [B] plain\n"
    
    def test_set_level(self, capsys):
        logger = SimulationLogger(level=LogLevel.WARNING)
        logger.set_level(LogLevel.DEBUG)
        logger.debug("now visible")
        
        assert "now visible" in capsys.readouterr().out
    
    def test_global_logger(self):
        from sr_arq.utils import get_logger, set_logger
        
        previous = get_logger()
        custom = SimulationLogger(name="Global")
        set_logger(custom)
        try:
            assert get_logger() is custom
        finally:
            set_logger(previous)
