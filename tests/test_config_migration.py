import unittest
from unittest import mock

from config import (
    Config,
    CURRENT_CONFIG_VERSION,
    FieldMode,
    apply_dict_to_dataclass,
    clamp_value,
    migrate_config,
    rename_legacy_keys,
)


class TestConfigMigration(unittest.TestCase):
    def test_missing_version_sets_defaults_and_bumps(self):
        cfg = Config()
        data = {
            # version intentionally omitted to simulate legacy file
            "params": {"speed": None, "damping": None},
            "flags": {"auto_mode": None},
        }

        apply_dict_to_dataclass(cfg, data)
        migrate_config(cfg, data.get("version"))

        defaults = Config()
        self.assertEqual(cfg.version, CURRENT_CONFIG_VERSION)
        self.assertEqual(cfg.params.speed, defaults.params.speed)
        self.assertEqual(cfg.params.damping, defaults.params.damping)
        self.assertEqual(cfg.flags.auto_mode, defaults.flags.auto_mode)

    def test_v1_field_resolution_is_clamped(self):
        cfg = Config()
        apply_dict_to_dataclass(cfg, {"version": 1, "render": {"field_resolution": 5000}})
        migrate_config(cfg, 1)
        self.assertEqual(cfg.render.field_resolution, 400)

    def test_current_version_keeps_render_settings(self):
        cfg = Config()
        cfg.render.field_resolution = 150
        migrate_config(cfg, CURRENT_CONFIG_VERSION)
        self.assertEqual(cfg.render.field_resolution, 150)

    def test_params_always_clamped(self):
        cfg = Config()
        apply_dict_to_dataclass(cfg, {"params": {"frequency_n": 85, "amplitude": None}})
        migrate_config(cfg, CURRENT_CONFIG_VERSION)
        self.assertEqual(cfg.params.frequency_n, 20.0)
        self.assertEqual(cfg.params.amplitude, Config().params.amplitude)

    def test_invalid_version_treated_as_legacy(self):
        cfg = Config()
        cfg.render.field_resolution = 2
        migrate_config(cfg, "garbage")
        self.assertEqual(cfg.render.field_resolution, 10)
        self.assertEqual(cfg.version, CURRENT_CONFIG_VERSION)

    def test_missing_ambient_fields_are_filled(self):
        cfg = Config()
        cfg.audio.smoothing_time_s = None
        cfg.auto.base_speed = None
        cfg.log_level = None
        migrate_config(cfg, CURRENT_CONFIG_VERSION)
        self.assertEqual(cfg.audio.smoothing_time_s, 0.1)
        self.assertEqual(cfg.auto.base_speed, 0.2)
        self.assertEqual(cfg.log_level, "INFO")


class TestApplyDict(unittest.TestCase):
    def test_enum_fields_are_coerced(self):
        cfg = Config()
        apply_dict_to_dataclass(cfg, {"params": {"mode": "interference"}})
        self.assertIs(cfg.params.mode, FieldMode.INTERFERENCE)

    def test_bad_enum_value_keeps_default(self):
        cfg = Config()
        with mock.patch("config.log_event") as log_event_mock:
            apply_dict_to_dataclass(cfg, {"params": {"mode": "spiral"}})
        self.assertIs(cfg.params.mode, FieldMode.CHLADNI)
        self.assertEqual(log_event_mock.call_args.args[0], "WARN")

    def test_non_dict_section_keeps_dataclass(self):
        cfg = Config()
        with mock.patch("config.log_event") as log_event_mock:
            apply_dict_to_dataclass(cfg, {"params": 5, "flags": None})
        self.assertEqual(cfg.params, Config().params)
        self.assertEqual(cfg.flags, Config().flags)
        self.assertEqual(log_event_mock.call_count, 2)
        migrate_config(cfg, None)
        self.assertEqual(cfg.version, CURRENT_CONFIG_VERSION)

    def test_unknown_keys_ignored(self):
        cfg = Config()
        apply_dict_to_dataclass(cfg, {"stroke": {"phase_advance": 0.3}, "params": {"bogus": 1}})
        self.assertEqual(cfg, Config())


class TestLegacyKeys(unittest.TestCase):
    def test_camel_case_params_renamed(self):
        renamed = rename_legacy_keys({"params": {"frequencyM": 4, "frequencyN": 2, "particleCount": 9000}})
        self.assertEqual(renamed["params"], {"frequency_m": 4, "frequency_n": 2, "particle_count": 9000})

    def test_snake_case_wins_over_legacy(self):
        renamed = rename_legacy_keys({"params": {"frequencyM": 4, "frequency_m": 7}})
        self.assertEqual(renamed["params"]["frequency_m"], 7)

    def test_non_dict_input(self):
        self.assertEqual(rename_legacy_keys(["not", "a", "config"]), {})


class TestClampValue(unittest.TestCase):
    def test_ranges(self):
        self.assertEqual(clamp_value("frequency_m", 0), 1.0)
        self.assertEqual(clamp_value("amplitude", 150), 100.0)
        self.assertEqual(clamp_value("particle_count", 12345.6), 12346)
        self.assertEqual(clamp_value("particle_count", "lots"), 1000)
        self.assertEqual(clamp_value("frequency_n", float("-inf")), 1.0)


if __name__ == "__main__":
    unittest.main()
