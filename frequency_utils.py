import math

# Square plate modal frequency grows roughly with m^2 + n^2; remapped to a
# comfortable listening band.
BASE_TONE_HZ = 100.0
MODE_ENERGY_HZ = 15.0
TONE_MIN_HZ = 60.0
TONE_MAX_HZ = 2000.0

# Amplitude percent -> caller volume, then a fixed attenuation at the oscillator
VOLUME_SCALE = 0.15
OUTPUT_GAIN_SCALE = 0.1


def tone_frequency(freq_m: float, freq_n: float) -> float:
    """Map the two mode indices to an audible tone frequency in Hz."""
    target = BASE_TONE_HZ + (freq_m ** 2 + freq_n ** 2) * MODE_ENERGY_HZ
    if math.isnan(target):
        return TONE_MIN_HZ
    return min(max(target, TONE_MIN_HZ), TONE_MAX_HZ)


def amplitude_to_volume(amplitude: float) -> float:
    """Map amplitude percent (0-100) to the tone volume requested from the engine."""
    if not math.isfinite(amplitude):
        return 0.0
    normalized = max(0.0, min(100.0, amplitude)) / 100.0
    return normalized * VOLUME_SCALE


def output_gain(volume: float) -> float:
    """Gain actually applied to the oscillator for a requested volume."""
    return max(0.0, volume) * OUTPUT_GAIN_SCALE
