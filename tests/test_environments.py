from __future__ import annotations

import tempfile
import unittest

import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

import pandas as pd

from trendstate.adapters.environment.replay import ReplayEnvironment
from trendstate.adapters.environment.simulated import SimulatedEnvironment
from trendstate.adapters.environment.system import SystemEnvironment
from trendstate.application.instance import TrendInstance
from trendstate.domain.model.features import extract_features
from trendstate.ports.environment import EnvironmentPort, FundsPort


def _frame() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "clock": [1700000500, 1700000512, 1700000524],
            "sequence": [200, 201, 202],
            "balance": [10, 2500, 999],
        }
    )


class TestFeatureExtraction(unittest.TestCase):
    def test_modulus_of_each_signal(self) -> None:
        env = SimulatedEnvironment(clock=1700000500, seq=123456, funds=10_000_042)
        self.assertEqual((500, 456, 42), tuple(extract_features(env)))

    def test_features_are_bounded(self) -> None:
        env = SimulatedEnvironment(clock=999, seq=1000, funds=1999)
        f = extract_features(env)
        self.assertEqual((999, 0, 999), tuple(f))
        for v in f:
            self.assertTrue(0 <= v <= 999)


class TestSimulatedEnvironment(unittest.TestCase):
    def test_satisfies_ports(self) -> None:
        env = SimulatedEnvironment()
        self.assertIsInstance(env, EnvironmentPort)
        self.assertIsInstance(env, FundsPort)

    def test_clock_never_moves_backwards(self) -> None:
        env = SimulatedEnvironment(clock=10)
        env.advance(5)
        self.assertEqual(15, env.logical_clock())
        with self.assertRaises(ValueError):
            env.set_clock(14)

    def test_commit_takes_next_slot(self) -> None:
        env = SimulatedEnvironment(clock=0, seq=7, clock_step_per_commit=12)
        env.commit()
        self.assertEqual((12, 8), (env.logical_clock(), env.sequence()))

    def test_deposit_and_withdraw(self) -> None:
        env = SimulatedEnvironment()
        env.deposit(30)
        env.deposit(12)
        with self.assertRaises(ValueError):
            env.deposit(-1)
        self.assertEqual(42, env.withdraw_all("a"))
        self.assertEqual(0, env.withdraw_all("a"))
        self.assertEqual({"a": 42}, env.payouts)

    def test_rejects_negative_signals(self) -> None:
        with self.assertRaises(ValueError):
            SimulatedEnvironment(funds=-1)


class TestReplayEnvironment(unittest.TestCase):
    def test_rows_are_replayed_in_order(self) -> None:
        env = ReplayEnvironment(_frame())
        self.assertEqual((500, 200, 10), tuple(extract_features(env)))
        self.assertTrue(env.advance())
        self.assertEqual((512, 201, 500), tuple(extract_features(env)))
        self.assertTrue(env.advance())
        self.assertTrue(env.exhausted())
        self.assertFalse(env.advance())
        self.assertEqual(2, env.position)

    def test_commit_does_not_move_unless_asked(self) -> None:
        env = ReplayEnvironment(_frame())
        env.commit()
        self.assertEqual(0, env.position)

        driven = ReplayEnvironment(_frame(), advance_on_commit=True)
        driven.commit()
        self.assertEqual(1, driven.position)

    def test_withdraw_is_applied_on_top_of_recording(self) -> None:
        env = ReplayEnvironment(_frame())
        env.advance()
        self.assertEqual(2500, env.withdraw_all("owner"))
        self.assertEqual(0, env.balance())
        env.advance()
        self.assertEqual(0, env.balance())
        self.assertEqual({"owner": 2500}, env.payouts)

    def test_validation(self) -> None:
        with self.assertRaises(ValueError):
            ReplayEnvironment(_frame().drop(columns=["balance"]))
        with self.assertRaises(ValueError):
            ReplayEnvironment(_frame().iloc[0:0])
        bad = _frame()
        bad.loc[1, "clock"] = 1
        with self.assertRaises(ValueError):
            ReplayEnvironment(bad)
        neg = _frame()
        neg.loc[2, "balance"] = -5
        with self.assertRaises(ValueError):
            ReplayEnvironment(neg)

    def test_from_csv_drives_an_instance(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = pathlib.Path(tmp) / "signals.csv"
            _frame().to_csv(path, index=False)
            env = ReplayEnvironment.from_csv(path)

        inst = TrendInstance(env)
        inst.initialize("owner")
        state = inst.update("owner")
        self.assertEqual((50, 20, 1), state.weights)
        self.assertEqual(1700000500, state.last_updated)

    def test_from_csv_missing_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            ReplayEnvironment.from_csv("/nonexistent/signals.csv")


class TestSystemEnvironment(unittest.TestCase):
    def test_clock_is_monotonic_even_if_wall_clock_steps_back(self) -> None:
        ticks = iter([1000.4, 999.0, 1001.9])
        env = SystemEnvironment(start_balance=5, time_fn=lambda: next(ticks))
        self.assertEqual(1000, env.logical_clock())
        self.assertEqual(1000, env.logical_clock())
        self.assertEqual(1001, env.logical_clock())

    def test_sequence_counts_commits(self) -> None:
        env = SystemEnvironment(start_sequence=3)
        env.commit()
        env.commit()
        self.assertEqual(5, env.sequence())
        env.deposit(7)
        self.assertEqual(7, env.withdraw_all("x"))


if __name__ == "__main__":
    unittest.main()
