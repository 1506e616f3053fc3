import unittest

from frequency_utils import (
    TONE_MAX_HZ,
    TONE_MIN_HZ,
    amplitude_to_volume,
    output_gain,
    tone_frequency,
)


class TestFrequencyUtils(unittest.TestCase):
    def test_tone_frequency_known_values(self):
        self.assertEqual(tone_frequency(1, 1), 130.0)
        self.assertEqual(tone_frequency(5, 5), 850.0)
        # 100 + 800 * 15 = 12100, clamped
        self.assertEqual(tone_frequency(20, 20), 2000.0)

    def test_tone_frequency_always_in_band(self):
        for m in (0.0, 0.5, 1.0, 3.3, 10.0, 20.0, 50.0):
            for n in (0.0, 1.0, 7.7, 20.0):
                freq = tone_frequency(m, n)
                self.assertGreaterEqual(freq, TONE_MIN_HZ)
                self.assertLessEqual(freq, TONE_MAX_HZ)
        self.assertEqual(tone_frequency(float("nan"), 1.0), TONE_MIN_HZ)
        self.assertEqual(tone_frequency(float("inf"), 1.0), TONE_MAX_HZ)

    def test_tone_frequency_monotonic_in_mode_energy(self):
        pairs = [(m / 4.0, n / 4.0) for m in range(4, 81, 3) for n in range(4, 81, 5)]
        pairs.sort(key=lambda p: p[0] ** 2 + p[1] ** 2)
        freqs = [tone_frequency(m, n) for m, n in pairs]
        for lower, higher in zip(freqs, freqs[1:]):
            self.assertLessEqual(lower, higher)

    def test_amplitude_to_volume(self):
        self.assertAlmostEqual(amplitude_to_volume(100), 0.15, places=12)
        self.assertAlmostEqual(amplitude_to_volume(50), 0.075, places=12)
        self.assertEqual(amplitude_to_volume(0), 0.0)
        self.assertAlmostEqual(amplitude_to_volume(250), 0.15, places=12)
        self.assertEqual(amplitude_to_volume(-5), 0.0)
        self.assertEqual(amplitude_to_volume(float("nan")), 0.0)

    def test_output_gain_attenuates(self):
        self.assertAlmostEqual(output_gain(0.15), 0.015, places=12)
        self.assertEqual(output_gain(0.0), 0.0)
        self.assertEqual(output_gain(-1.0), 0.0)


if __name__ == "__main__":
    unittest.main()
