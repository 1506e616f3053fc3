import unittest

from config import DisplayFlags, FieldMode, SimulationParams
from parameter_store import SOURCE_AUTO, ParameterStore, clamp_params


class TestClampParams(unittest.TestCase):
    def test_out_of_range_values_are_clamped(self):
        params = clamp_params(SimulationParams(
            frequency_m=0.2, frequency_n=42.0, amplitude=-3.0, particle_count=50,
        ))
        self.assertEqual(params.frequency_m, 1.0)
        self.assertEqual(params.frequency_n, 20.0)
        self.assertEqual(params.amplitude, 0.0)
        self.assertEqual(params.particle_count, 1000)
        self.assertIsInstance(params.particle_count, int)

    def test_non_finite_collapses_to_minimum(self):
        params = clamp_params(SimulationParams(frequency_m=float("nan"), amplitude=float("inf")))
        self.assertEqual(params.frequency_m, 1.0)
        self.assertEqual(params.amplitude, 0.0)

    def test_mode_is_coerced(self):
        self.assertIs(clamp_params(SimulationParams(mode="interference")).mode, FieldMode.INTERFERENCE)
        self.assertIs(clamp_params(SimulationParams(mode="bogus")).mode, FieldMode.CHLADNI)


class TestParameterStore(unittest.TestCase):
    def setUp(self):
        self.store = ParameterStore()
        self.events = []

    def _record(self, snapshot, changed, source):
        self.events.append((snapshot, changed, source))

    def test_defaults(self):
        self.assertEqual(self.store.params, SimulationParams())
        self.assertEqual(self.store.flags, DisplayFlags())

    def test_update_notifies_with_changed_keys(self):
        self.store.subscribe(self._record)
        changed = self.store.update_params(frequency_m=4.0, amplitude=100.0)

        self.assertEqual(changed, frozenset({"frequency_m"}))
        self.assertEqual(len(self.events), 1)
        snapshot, event_changed, source = self.events[0]
        self.assertEqual(event_changed, changed)
        self.assertEqual(source, "user")
        self.assertEqual(snapshot.params.frequency_m, 4.0)

    def test_unchanged_update_is_silent(self):
        self.store.subscribe(self._record)
        self.assertEqual(self.store.update_params(frequency_m=1.0), frozenset())
        self.assertEqual(self.store.update_flags(auto_mode=True), frozenset())
        self.assertEqual(self.events, [])

    def test_clamped_values_are_stored(self):
        self.store.update_params(particle_count=500000, frequency_n=-2)
        self.assertEqual(self.store.params.particle_count, 30000)
        self.assertEqual(self.store.params.frequency_n, 1.0)

    def test_keyed_subscription_filters(self):
        self.store.subscribe(self._record, keys=("amplitude",))
        self.store.update_params(frequency_m=3.0)
        self.assertEqual(self.events, [])
        self.store.update_params(amplitude=40.0, source=SOURCE_AUTO)
        self.assertEqual(len(self.events), 1)
        self.assertEqual(self.events[0][2], SOURCE_AUTO)

    def test_unsubscribe(self):
        unsubscribe = self.store.subscribe(self._record)
        unsubscribe()
        unsubscribe()
        self.store.update_params(frequency_m=3.0)
        self.assertEqual(self.events, [])

    def test_unknown_keys_raise(self):
        with self.assertRaises(KeyError):
            self.store.update_params(frequency_x=3.0)
        with self.assertRaises(KeyError):
            self.store.update_flags(show_everything=True)

    def test_snapshots_are_not_mutated(self):
        before = self.store.snapshot()
        self.store.update_params(frequency_m=7.0)
        self.store.update_flags(show_field=True)
        self.assertEqual(before.params.frequency_m, 1.0)
        self.assertFalse(before.flags.show_field)
        self.assertTrue(self.store.flags.show_field)

    def test_flags_are_coerced_to_bool(self):
        self.store.update_flags(show_field=1)
        self.assertIs(self.store.flags.show_field, True)

    def test_constructor_coerces_flags(self):
        store = ParameterStore(flags=DisplayFlags(show_field=1, audio_enabled="false", auto_mode="no"))
        self.assertIs(store.flags.show_field, True)
        self.assertIs(store.flags.audio_enabled, False)
        self.assertIs(store.flags.auto_mode, False)

    def test_update_flags_reads_false_strings(self):
        self.store.update_flags(audio_enabled="false")
        self.assertIs(self.store.flags.audio_enabled, False)

    def test_constructor_clamps_initial_params(self):
        store = ParameterStore(SimulationParams(frequency_m=99.0))
        self.assertEqual(store.params.frequency_m, 20.0)


if __name__ == "__main__":
    unittest.main()
