import unittest

from vibeos.ledger import LoopResult
from vibeos.stagnation import CrashLoopConfig, detect_crash_loop


def _history(diffs):
    return [LoopResult(loop_number=i + 1, phase="auditor", success=d == 0, diff=d) for i, d in enumerate(diffs)]


class CrashLoopConfigTests(unittest.TestCase):
    def test_defaults(self):
        config = CrashLoopConfig()
        self.assertEqual(config.max_total_loops, 10)
        self.assertEqual(config.max_stagnation_count, 5)
        self.assertAlmostEqual(config.stagnation_threshold, 0.1)

    def test_rejects_out_of_range_values(self):
        with self.assertRaises(ValueError):
            CrashLoopConfig(max_total_loops=0)
        with self.assertRaises(ValueError):
            CrashLoopConfig(max_stagnation_count=0)
        with self.assertRaises(ValueError):
            CrashLoopConfig(stagnation_threshold=1.5)
        with self.assertRaises(ValueError):
            CrashLoopConfig(stagnation_threshold=-0.1)

    def test_from_dict_fills_defaults(self):
        config = CrashLoopConfig.from_dict({"max_total_loops": "20"})
        self.assertEqual(config.max_total_loops, 20)
        self.assertEqual(config.max_stagnation_count, 5)


class DetectCrashLoopTests(unittest.TestCase):
    def setUp(self):
        self.config = CrashLoopConfig(max_total_loops=10, max_stagnation_count=5, stagnation_threshold=0.1)

    def test_short_history_never_stagnates(self):
        for n in range(5):
            self.assertFalse(detect_crash_loop(_history([5] * n), self.config))

    def test_constant_window_stagnates(self):
        self.assertTrue(detect_crash_loop(_history([5, 5, 5, 5, 5]), self.config))

    def test_steady_improvement_is_progress(self):
        self.assertFalse(detect_crash_loop(_history([100, 80, 60, 40, 20]), self.config))

    def test_single_sufficient_step_is_enough(self):
        self.assertFalse(detect_crash_loop(_history([10, 10, 10, 9, 9]), self.config))

    def test_small_steps_below_threshold_stagnate(self):
        self.assertTrue(detect_crash_loop(_history([100, 95, 91, 87, 83]), self.config))

    def test_only_trailing_window_counts(self):
        # The big drop from 50 to 5 falls outside the last five entries.
        self.assertTrue(detect_crash_loop(_history([50, 5, 5, 5, 5, 5]), self.config))

    def test_worsening_is_not_progress(self):
        self.assertTrue(detect_crash_loop(_history([1, 2, 3, 4, 5]), self.config))

    def test_zero_previous_diff_is_skipped(self):
        self.assertTrue(detect_crash_loop(_history([0, 5, 5, 5, 5]), self.config))

    def test_unparseable_sentinel_pushes_toward_stagnation(self):
        self.assertTrue(detect_crash_loop(_history([-1, -1, -1, -1, -1]), self.config))
        # a drop from a positive diff to the sentinel reads as a large improvement
        self.assertFalse(detect_crash_loop(_history([3, -1, -1, -1, -1]), self.config))

    def test_threshold_boundary_counts_as_progress(self):
        self.assertFalse(detect_crash_loop(_history([9, 10, 9, 10, 9]), self.config))


if __name__ == "__main__":
    unittest.main()
