import threading
import unittest

from game import CooperativeScheduler, GameSession, ThreadingScheduler
from helpers import FixedShuffle


class FakeClock:
    def __init__(self):
        self.t = 100.0

    def __call__(self):
        return self.t


class TestCooperativeScheduler(unittest.TestCase):
    def test_given_callbacks_when_clock_passes_deadline_then_run_in_deadline_order(self):
        clock = FakeClock()
        sched = CooperativeScheduler(clock=clock)
        ran = []
        sched.call_later(2.0, lambda: ran.append('b'))
        sched.call_later(1.0, lambda: ran.append('a'))
        sched.call_later(1.0, lambda: ran.append('a2'))
        self.assertEqual(sched.run_due(), 0)
        self.assertEqual(sched.next_deadline(), 101.0)
        clock.t = 101.0
        self.assertEqual(sched.run_due(), 2)
        self.assertEqual(ran, ['a', 'a2'])
        clock.t = 105.0
        sched.run_due()
        self.assertEqual(ran, ['a', 'a2', 'b'])
        self.assertEqual(sched.pending(), 0)
        self.assertIsNone(sched.next_deadline())

    def test_given_advance_then_time_moves_without_sleeping(self):
        sched = CooperativeScheduler(clock=FakeClock())
        ran = []
        sched.call_later(1.0, lambda: ran.append(1))
        self.assertEqual(sched.advance(0.99), 0)
        self.assertEqual(sched.advance(0.01), 1)
        self.assertEqual(ran, [1])

    def test_given_callback_scheduling_due_work_then_it_runs_in_same_pass(self):
        sched = CooperativeScheduler(clock=FakeClock())
        ran = []
        sched.call_later(1.0, lambda: sched.call_later(0.0, lambda: ran.append('inner')))
        sched.advance(1.0)
        self.assertEqual(ran, ['inner'])

    def test_given_negative_values_then_value_error(self):
        sched = CooperativeScheduler(clock=FakeClock())
        with self.assertRaises(ValueError):
            sched.call_later(-1, lambda: None)
        with self.assertRaises(ValueError):
            sched.advance(-1)


class TestThreadingScheduler(unittest.TestCase):
    def test_given_mismatch_when_timer_thread_fires_then_cards_flip_back(self):
        s = GameSession(2, rng=FixedShuffle(['2', '1', '1', '2']), scheduler=ThreadingScheduler(),
                        flip_delay=0.01)
        done = threading.Event()
        s.subscribe(lambda e: done.set() if e.kind == 'flip_back' else None)
        s.tap(0)
        s.tap(1)
        self.assertTrue(done.wait(5.0))
        self.assertEqual([c.face_up for c in s.cards], [False] * 4)

    def test_given_failing_callback_then_logged_not_raised(self):
        done = threading.Event()

        def boom():
            done.set()
            raise RuntimeError('boom')

        with self.assertLogs('memory_core.scheduler', level='ERROR'):
            ThreadingScheduler().call_later(0.0, boom)
            self.assertTrue(done.wait(5.0))
            # Give the timer thread a moment to log after setting the event.
            for t in threading.enumerate():
                if isinstance(t, threading.Timer):
                    t.join(5.0)


if __name__ == '__main__':
    unittest.main(verbosity=2)
