import unittest

from auto_driver import AutoDriver
from config import DisplayFlags, SimulationParams
from control_wiring import (
    AudioSync,
    AutoDriverSync,
    apply_audio_state,
    apply_auto_tick,
    apply_user_change,
)
from parameter_store import ParameterStore


class FakeTone:
    def __init__(self):
        self.calls = []

    def play_tone(self, freq_m, freq_n, volume):
        self.calls.append(("play", freq_m, freq_n, round(volume, 6)))

    def stop_tone(self):
        self.calls.append(("stop",))


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestUserChanges(unittest.TestCase):
    def test_frequency_edit_disables_auto_mode(self):
        store = ParameterStore(flags=DisplayFlags(auto_mode=True))
        apply_user_change(store, "frequency_n", 6.0)
        self.assertFalse(store.flags.auto_mode)
        self.assertEqual(store.params.frequency_n, 6.0)

    def test_amplitude_edit_keeps_auto_mode(self):
        store = ParameterStore(flags=DisplayFlags(auto_mode=True))
        apply_user_change(store, "amplitude", 20.0)
        self.assertTrue(store.flags.auto_mode)


class TestAutoTick(unittest.TestCase):
    def test_disabled_driver_writes_nothing(self):
        store = ParameterStore()
        driver = AutoDriver(clock=FakeClock())
        self.assertFalse(apply_auto_tick(store, driver))
        self.assertEqual(store.params, SimulationParams())

    def test_tick_writes_frequencies_as_auto(self):
        store = ParameterStore()
        seen = []
        store.subscribe(lambda snap, changed, source: seen.append(source))
        clock = FakeClock()
        driver = AutoDriver(clock=clock)
        driver.enable()
        clock.now = 5.0

        self.assertTrue(apply_auto_tick(store, driver))
        freq_n, freq_m = driver.current()
        self.assertAlmostEqual(store.params.frequency_n, freq_n)
        self.assertAlmostEqual(store.params.frequency_m, freq_m)
        self.assertEqual(seen, ["auto"])


class TestAudioSync(unittest.TestCase):
    def test_apply_audio_state(self):
        tone = FakeTone()
        store = ParameterStore(SimulationParams(frequency_m=2.0, frequency_n=3.0, amplitude=50.0))
        apply_audio_state(tone, store.snapshot())
        self.assertEqual(tone.calls, [("play", 2.0, 3.0, 0.075)])

        store.update_params(amplitude=0.0)
        apply_audio_state(tone, store.snapshot())
        self.assertEqual(tone.calls[-1], ("stop",))

    def test_follows_store_changes(self):
        tone = FakeTone()
        store = ParameterStore()
        sync = AudioSync(store, tone)

        store.update_params(frequency_m=4.0)
        self.assertEqual(tone.calls[-1][0], "play")
        store.update_flags(audio_enabled=False)
        self.assertEqual(tone.calls[-1], ("stop",))

        count = len(tone.calls)
        store.update_flags(show_field=True)
        self.assertEqual(len(tone.calls), count)

        sync.detach()
        store.update_params(frequency_m=9.0)
        self.assertEqual(len(tone.calls), count)

    def test_refresh_applies_current_state(self):
        tone = FakeTone()
        sync = AudioSync(ParameterStore(), tone)
        sync.refresh()
        self.assertEqual(tone.calls, [("play", 1.0, 1.0, 0.15)])


class TestAutoDriverSync(unittest.TestCase):
    def test_driver_tracks_auto_flag(self):
        store = ParameterStore(flags=DisplayFlags(auto_mode=True))
        driver = AutoDriver(clock=FakeClock())
        sync = AutoDriverSync(store, driver)
        self.assertTrue(driver.enabled)

        apply_user_change(store, "frequency_m", 3.0)
        self.assertFalse(driver.enabled)

        store.update_flags(auto_mode=True)
        self.assertTrue(driver.enabled)

        sync.detach()
        store.update_flags(auto_mode=False)
        self.assertTrue(driver.enabled)


if __name__ == "__main__":
    unittest.main()
