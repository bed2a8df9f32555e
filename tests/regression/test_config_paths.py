import unittest

from strareco import settings as s


class TestConfigAndPathDerivation(unittest.TestCase):
    def test_runtime_paths_derive_from_common(self) -> None:
        cfg = {
            "common": {
                "mc_production": "LHC99mc",
                "variant": "vreg",
                "base_input_dir": "/tmp/in/",
                "base_output_root": "/tmp/out/",
            },
        }
        runtime = s.current_runtime_config(cfg)

        self.assertEqual(runtime.paths.base_output_dir, "/tmp/out/LHC99mc/vreg/")
        self.assertEqual(runtime.paths.ao2d_filename, "/tmp/in/MC/LHC99mc/AO2D.root")
        self.assertEqual(runtime.paths.analysis_output, "/tmp/out/LHC99mc/vreg/StraRecoQA.root")
        self.assertEqual(runtime.paths.efficiency_output, "/tmp/out/LHC99mc/vreg/efficiency.root")
        self.assertEqual(runtime.paths.metadata_output, "/tmp/out/LHC99mc/vreg/run_metadata.json")

    def test_user_paths_take_precedence(self) -> None:
        runtime = s.current_runtime_config(
            {
                "paths": {"ao2d": "/data/AO2D_merged.root", "analysis_output": "qa.root"},
                "compare": {"reference": "ref.root"},
            }
        )
        self.assertEqual(runtime.paths.ao2d_filename, "/data/AO2D_merged.root")
        self.assertEqual(runtime.paths.analysis_output, "qa.root")
        self.assertEqual(runtime.paths.reference, "ref.root")

    def test_merge_config_keeps_nested_defaults(self) -> None:
        merged = s.merge_config({"v0setting": {"cospa": 0.99}})

        self.assertEqual(merged["v0setting"]["cospa"], 0.99)
        self.assertEqual(merged["v0setting"]["dcav0dau"], 1.0)
        self.assertIn("cascadesetting", merged)

    def test_defaults_match_reference_cuts(self) -> None:
        runtime = s.current_runtime_config()

        self.assertAlmostEqual(runtime.v0.cospa, 0.95)
        self.assertAlmostEqual(runtime.v0.dcav0dau, 1.0)
        self.assertAlmostEqual(runtime.v0.dcapostopv, 0.1)
        self.assertAlmostEqual(runtime.v0.dcanegtopv, 0.1)
        self.assertAlmostEqual(runtime.v0.radius, 0.9)
        self.assertAlmostEqual(runtime.cascade.cospa, 0.95)
        self.assertAlmostEqual(runtime.cascade.dcacascdau, 1.0)
        self.assertAlmostEqual(runtime.cascade.dcabachtopv, 0.1)
        self.assertAlmostEqual(runtime.cascade.cascradius, 0.5)
        self.assertEqual(runtime.tracks.min_tpc_crossed_rows, 70)
        self.assertEqual(runtime.tracks.min_its_clusters, 4)
        self.assertTrue(runtime.event.sel8_selection)
        self.assertTrue(runtime.event.posz_selection)
        self.assertAlmostEqual(runtime.max_rapidity, 0.5)

    def test_process_switches(self) -> None:
        runtime = s.current_runtime_config({"run": {"process_pure_generated": False}})

        self.assertTrue(runtime.process_enabled("process_mc"))
        self.assertFalse(runtime.process_enabled("process_pure_generated"))
        with self.assertRaisesRegex(ValueError, "Unknown process switch"):
            runtime.process_enabled("process_data")
        with self.assertRaises(TypeError):
            runtime.process["process_mc"] = False

    def test_invalid_values_are_rejected(self) -> None:
        with self.assertRaisesRegex(ValueError, "v0setting.cospa"):
            s.current_runtime_config({"v0setting": {"cospa": 1.5}})
        with self.assertRaisesRegex(ValueError, "compare.alpha"):
            s.current_runtime_config({"compare": {"alpha": 0.0}})
        with self.assertRaisesRegex(ValueError, r"Missing or invalid \[tracks\] table"):
            s.current_runtime_config({"tracks": "strict"})
        with self.assertRaisesRegex(ValueError, "event.max_posZ"):
            s.current_runtime_config({"event": {"max_posZ": -1.0}})


if __name__ == "__main__":
    unittest.main()
