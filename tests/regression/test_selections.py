import unittest

from strareco import selections as sel
from strareco import settings as s
from strareco.species import get_species


class TestSelectionStrings(unittest.TestCase):
    def setUp(self) -> None:
        self.cfg = s.current_runtime_config()

    def test_join_drops_trivial_terms(self) -> None:
        self.assertEqual(sel.join_selections(), "true")
        self.assertEqual(sel.join_selections("true", " "), "true")
        self.assertEqual(sel.join_selections("a > 1", "true"), "a > 1")
        self.assertEqual(sel.join_selections("a > 1", "b < 2"), "(a > 1) && (b < 2)")

    def test_event_steps_are_cumulative(self) -> None:
        steps = sel.event_selection_steps(self.cfg)

        self.assertEqual([label for label, _ in steps], ["All collisions", "Sel8 cut", "posZ cut"])
        self.assertEqual(steps[0][1], "true")
        self.assertEqual(steps[1][1], "fSel8")
        self.assertEqual(steps[2][1], "(fSel8) && (std::abs(fPosZ) <= 10.0)")
        self.assertEqual(sel.event_selection(self.cfg), steps[2][1])

    def test_disabled_event_steps_pass_everything(self) -> None:
        cfg = s.current_runtime_config({"event": {"sel8_selection": False, "posZ_selection": False}})
        steps = sel.event_selection_steps(cfg)

        self.assertEqual(len(steps), 3)
        self.assertTrue(all(expr == "true" for _, expr in steps))

    def test_daughter_quality_covers_every_prong(self) -> None:
        expr = sel.daughter_quality(self.cfg, sel.CASCADE_PRONGS)

        for prong in ("Pos", "Neg", "Bach"):
            self.assertIn(f"f{prong}ITSNCls >= 4", expr)
            self.assertIn(f"f{prong}TPCNClsCrossedRows >= 70", expr)

    def test_v0_cuts_follow_config(self) -> None:
        cfg = s.current_runtime_config({"v0setting": {"cospa": 0.99, "radius": 1.2}})

        self.assertIn("v0cosPA > 0.99", sel.v0_topology(cfg))
        self.assertIn("v0radius > 1.2", sel.v0_topology(cfg))
        self.assertIn("fDCAV0Daughters < 1.0", sel.v0_prefilter(cfg))
        self.assertIn("std::abs(yMC) <= 0.5", sel.v0_association(cfg))

    def test_cascade_cuts(self) -> None:
        self.assertIn("fHasV0Data", sel.cascade_association(self.cfg))
        self.assertIn("std::abs(fDCABachToPV) > 0.1", sel.cascade_prefilter(self.cfg))
        self.assertIn("fDCACascDaughters < 1.0", sel.cascade_prefilter(self.cfg))
        self.assertIn("cascradius > 0.5", sel.cascade_topology(self.cfg))
        self.assertNotIn("fDCACascDaughters", sel.cascade_topology(self.cfg))

    def test_candidate_selection_contains_event_cuts(self) -> None:
        self.assertIn("fSel8", sel.v0_candidate_selection(self.cfg))
        self.assertIn("fBachTPCNClsCrossedRows", sel.cascade_candidate_selection(self.cfg))
        self.assertNotIn("fBachITSNCls", sel.v0_candidate_selection(self.cfg))

    def test_generated_acceptance_is_open_interval(self) -> None:
        self.assertEqual(sel.generated_acceptance(self.cfg), "std::abs(yMC) < 0.5")
        self.assertEqual(sel.pdg_selection(get_species("AntiLambda")), "fPdgCode == -3122")


if __name__ == "__main__":
    unittest.main()
