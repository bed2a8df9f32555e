import unittest

from strareco.compare_logic import comparison_passed, status_from_metrics, summarize


class TestCompareStatus(unittest.TestCase):
    def test_missing_histogram(self) -> None:
        self.assertEqual(status_from_metrics(False, {}, 0.05), "MISSING")

    def test_empty_on_both_sides(self) -> None:
        metrics = {"reference_entries": 0, "candidate_entries": 0, "p_value": None}
        self.assertEqual(status_from_metrics(True, metrics, 0.05), "EMPTY")

    def test_one_sided_fill_is_ko(self) -> None:
        metrics = {"reference_entries": 10, "candidate_entries": 0, "p_value": None}
        self.assertEqual(status_from_metrics(True, metrics, 0.05), "KO")

    def test_identical_contents_are_ok_without_p_value(self) -> None:
        metrics = {"reference_entries": 1, "candidate_entries": 1, "identical": True, "p_value": None}
        self.assertEqual(status_from_metrics(True, metrics, 0.05), "OK")
        metrics["identical"] = False
        self.assertEqual(status_from_metrics(True, metrics, 0.05), "KO")

    def test_p_value_threshold(self) -> None:
        base = {"reference_entries": 10, "candidate_entries": 12}
        self.assertEqual(status_from_metrics(True, {**base, "p_value": 0.5}, 0.05), "OK")
        self.assertEqual(status_from_metrics(True, {**base, "p_value": 0.05}, 0.05), "OK")
        self.assertEqual(status_from_metrics(True, {**base, "p_value": 0.01}, 0.05), "KO")

    def test_summary_and_pass(self) -> None:
        summary = summarize({"a": "OK", "b": "EMPTY", "c": "OK"})

        self.assertEqual(summary, {"OK": 2, "KO": 0, "MISSING": 0, "EMPTY": 1})
        self.assertTrue(comparison_passed(summary))
        self.assertFalse(comparison_passed(summarize({"a": "OK", "b": "MISSING"})))
        self.assertFalse(comparison_passed(summarize({"a": "KO"})))

    def test_unknown_status(self) -> None:
        with self.assertRaisesRegex(ValueError, "Unknown comparison status"):
            summarize({"a": "WARN"})


if __name__ == "__main__":
    unittest.main()
