"""
End-to-end tests: engines driven by the discrete-event emulator.
"""

import pytest

from sr_arq.simulation.simulator import Simulator, SimulatorConfig, EventType
from sr_arq.layers.application import MessageGenerator, DeliveryVerifier


def run(**kwargs):
    kwargs.setdefault('trace', -1)
    sim = Simulator(SimulatorConfig(**kwargs))
    results = sim.run()
    sim.close()
    return sim, results


class TestSimulator:
    """Tests for whole-protocol behaviour."""
    
    def test_perfect_channel(self):
        """Every accepted message is delivered, in order, once."""
        sim, results = run(num_messages=30, seed=1)
        
        verification = results['verification']
        assert results['complete']
        assert verification['valid']
        assert verification['complete']
        assert verification['delivered'] == verification['accepted']
        assert results['timer']['timer_misuse'] == 0
    
    @pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
    def test_lossy_corrupting_channel(self, seed):
        """In-order exactly-once delivery under loss and corruption."""
        sim, results = run(num_messages=150, loss_prob=0.2,
                           corrupt_prob=0.2, seed=seed)
        
        metrics = results['metrics']
        verification = results['verification']
        assert results['complete']
        assert verification['valid']
        assert verification['complete']
        assert metrics['messages_delivered'] == metrics['messages_accepted']
        assert metrics['packets_lost'] > 0
        assert metrics['packets_corrupted'] > 0
        assert metrics['packets_resent'] > 0
        assert results['timer']['timer_misuse'] == 0
    
    def test_busy_source_fills_window(self):
        """A fast source hits the window limit; rejected messages are lost."""
        sim, results = run(num_messages=200, mean_interval=0.5,
                           loss_prob=0.1, seed=9)
        
        metrics = results['metrics']
        assert metrics['window_full'] > 0
        assert metrics['messages_accepted'] + metrics['window_full'] == 200
        assert results['verification']['valid']
        assert results['verification']['complete']
    
    def test_one_resend_per_timeout(self):
        sim, results = run(num_messages=100, loss_prob=0.3, seed=4)
        
        metrics = results['metrics']
        assert metrics['packets_resent'] == metrics['timeouts']
    
    def test_dead_channel_hits_time_limit(self):
        sim, results = run(num_messages=3, loss_prob=1.0, max_time=500.0)
        
        assert not results['complete']
        assert results['metrics']['messages_delivered'] == 0
        assert results['verification']['valid']
        assert results['simulation_time'] <= 500.0
    
    def test_seeded_runs_repeat(self):
        _, first = run(num_messages=50, loss_prob=0.2, corrupt_prob=0.1, seed=21)
        _, second = run(num_messages=50, loss_prob=0.2, corrupt_prob=0.1, seed=21)
        
        assert first['metrics'] == second['metrics']
    
    def test_window_bound_during_run(self):
        """windowcount never exceeds the window while events are handled."""
        sim = Simulator(SimulatorConfig(num_messages=120, mean_interval=1.0,
                                        loss_prob=0.2, corrupt_prob=0.1,
                                        seed=8, trace=-1))
        observed = []
        original = sim._handle_from_layer3
        
        def watch(event):
            original(event)
            state = sim.sender.state
            observed.append(state.windowcount + state.ackcount)
            assert len(sim.receiver.state.buffered()) <= sim.config.window_size
        
        sim._handle_from_layer3 = watch
        results = sim.run()
        sim.close()
        
        assert observed
        assert max(observed) <= sim.config.window_size
        assert results['verification']['valid']
    
    def test_no_messages(self):
        sim, results = run(num_messages=0)
        
        assert results['events'] == 0
        assert results['complete']
    
    def test_event_ordering(self):
        """Events at the same time keep scheduling order."""
        sim = Simulator(SimulatorConfig(trace=-1))
        sim._schedule_event(5.0, EventType.TIMER_INTERRUPT)
        sim._schedule_event(5.0, EventType.FROM_LAYER5)
        sim._schedule_event(1.0, EventType.FROM_LAYER3)
        
        kinds = [e.event_type for e in sorted(sim.event_queue)]
        sim.close()
        
        assert kinds == [EventType.FROM_LAYER3, EventType.TIMER_INTERRUPT,
                         EventType.FROM_LAYER5]
    
    @pytest.mark.parametrize("loss,corrupt", [(0.0, 0.0), (0.2, 0.2)])
    def test_uneven_sequence_space(self, loss, corrupt):
        """A sequence space that is not a multiple of the window wraps cleanly."""
        sim, results = run(num_messages=200, window_size=6, seq_space=13,
                           mean_interval=6.0, loss_prob=loss,
                           corrupt_prob=corrupt, seed=3)
        
        metrics = results['metrics']
        assert results['complete']
        assert results['verification']['valid']
        assert results['verification']['complete']
        assert metrics['messages_delivered'] == metrics['messages_accepted']
        assert metrics['messages_accepted'] > 13
        assert results['timer']['timer_misuse'] == 0
    
    def test_invalid_config(self):
        with pytest.raises(ValueError):
            SimulatorConfig(num_messages=-1)
        with pytest.raises(ValueError):
            Simulator(SimulatorConfig(window_size=6, seq_space=8, trace=-1))
        with pytest.raises(ValueError):
            SimulatorConfig(window_size=6, seq_space=8)
    
    def test_components_built_by_run(self):
        """Each run builds fresh components from the seed and repeats exactly."""
        sim = Simulator(SimulatorConfig(num_messages=40, loss_prob=0.2,
                                        corrupt_prob=0.1, seed=11, trace=-1))
        assert sim.sender is None
        assert sim.channels == {}
        
        first = sim.run()
        first_sender = sim.sender
        second = sim.run()
        sim.close()
        
        assert sim.sender is not first_sender
        assert first['metrics'] == second['metrics']
        assert first['verification'] == second['verification']


class TestApplicationLayer:
    """Tests for the message source and delivery check."""
    
    def test_messages_cycle_alphabet(self):
        gen = MessageGenerator(seed=0)
        messages = [gen.next_message() for _ in range(27)]
        
        assert messages[0] == b"a" * 20
        assert messages[25] == b"z" * 20
        assert messages[26] == b"a" * 20
    
    def test_intervals_bounded(self):
        gen = MessageGenerator(mean_interval=10.0, seed=0)
        intervals = [gen.next_interval() for _ in range(200)]
        
        assert all(0.0 <= i <= 20.0 for i in intervals)
    
    def test_verifier_detects_reordering(self):
        verifier = DeliveryVerifier()
        for n in range(3):
            verifier.record_accepted(MessageGenerator.make_message(n))
        verifier.record_delivered(MessageGenerator.make_message(1))
        
        valid, details = verifier.verify()
        
        assert not valid
        assert details['first_mismatch'] == 0
    
    def test_verifier_accepts_prefix(self):
        verifier = DeliveryVerifier()
        for n in range(3):
            verifier.record_accepted(MessageGenerator.make_message(n))
        verifier.record_delivered(MessageGenerator.make_message(0))
        
        valid, details = verifier.verify()
        
        assert valid
        assert not details['complete']
    
    def test_verifier_detects_duplicates(self):
        verifier = DeliveryVerifier()
        verifier.record_accepted(MessageGenerator.make_message(0))
        verifier.record_delivered(MessageGenerator.make_message(0))
        verifier.record_delivered(MessageGenerator.make_message(0))
        
        valid, details = verifier.verify()
        
        assert not valid
        assert details['first_mismatch'] == 1
