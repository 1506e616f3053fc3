"""
Cymatics - Audio Engine
Continuous sine tone that follows the plate frequencies.
Uses sounddevice for output; the stream is opened on the first tone request
and retuned in place afterwards so parameter changes never click.
"""

import math
import threading
from enum import Enum
from typing import Callable, Optional

import numpy as np

from config import AudioConfig
from frequency_utils import output_gain, tone_frequency
from logging_utils import log_event


class ToneState(Enum):
    UNINITIALIZED = "uninitialized"   # No output stream yet
    MUTED = "muted"                   # Stream open, gain ramping/at zero
    PLAYING = "playing"               # Oscillator running with a target gain
    UNAVAILABLE = "unavailable"       # Output could not be opened; tone calls are no-ops


StreamFactory = Callable[[AudioConfig, Callable], object]


def _sounddevice_stream(config: AudioConfig, callback):
    import sounddevice as sd

    return sd.OutputStream(
        samplerate=config.sample_rate,
        channels=1,
        dtype="float32",
        blocksize=config.block_size,
        device=config.device_index,
        callback=callback,
    )


class ToneEngine:
    """Lazily created oscillator + gain with exponential parameter smoothing.

    Frequency and gain approach their targets like WebAudio's
    setTargetAtTime: value(t) = target + (start - target) * exp(-t / tau).
    """

    def __init__(self, config: Optional[AudioConfig] = None,
                 stream_factory: Optional[StreamFactory] = None):
        self.config = config if config is not None else AudioConfig()
        self._stream_factory = stream_factory or _sounddevice_stream
        self._lock = threading.Lock()

        self.state = ToneState.UNINITIALIZED
        self.stream = None
        self._oscillator_started = False

        # Oscillator state (audio thread reads, UI thread writes targets)
        self._phase = 0.0
        self._frequency = 0.0
        self._frequency_target = 0.0
        self._gain = 0.0
        self._gain_target = 0.0

    @property
    def sample_rate(self) -> int:
        return int(self.config.sample_rate)

    @property
    def frequency_target(self) -> float:
        with self._lock:
            return self._frequency_target

    @property
    def gain_target(self) -> float:
        with self._lock:
            return self._gain_target

    @property
    def oscillator_started(self) -> bool:
        return self._oscillator_started

    def _ensure_initialized(self) -> bool:
        """Open the output stream once. Returns False when audio is unavailable."""
        if self.state == ToneState.UNAVAILABLE:
            return False
        if self.stream is not None:
            return True
        if not self.config.enabled:
            self.state = ToneState.UNAVAILABLE
            log_event("INFO", "Audio", "Audio output disabled by config")
            return False

        try:
            self.stream = self._stream_factory(self.config, self._audio_callback)
        except Exception as e:
            # sounddevice raises OSError when PortAudio is missing and
            # PortAudioError for device problems
            self.state = ToneState.UNAVAILABLE
            log_event("WARN", "Audio", "Output unavailable, tone disabled", error=e)
            return False

        with self._lock:
            self._gain = 0.0
            self._gain_target = 0.0
        self.state = ToneState.MUTED
        log_event("INFO", "Audio", "Output stream created",
                  sample_rate=self.sample_rate, block=self.config.block_size)
        return True

    def play_tone(self, freq_m: float, freq_n: float, volume: float) -> None:
        """Start or retune the tone for the given mode indices and volume."""
        if not self._ensure_initialized():
            return

        freq = tone_frequency(freq_m, freq_n)
        gain = output_gain(volume)

        with self._lock:
            if not self._oscillator_started:
                self._frequency = freq
            self._frequency_target = freq
            self._gain_target = gain

        if not self._oscillator_started:
            try:
                if not self.stream.active:
                    self.stream.start()
            except Exception as e:
                self.state = ToneState.UNAVAILABLE
                log_event("WARN", "Audio", "Could not start oscillator, tone disabled", error=e)
                return
            self._oscillator_started = True
            log_event("INFO", "Audio", "Oscillator started", freq_hz=f"{freq:.1f}")

        self.state = ToneState.PLAYING
        log_event("DEBUG", "Audio", "Retune", freq_hz=f"{freq:.1f}", gain=f"{gain:.4f}")

    def stop_tone(self) -> None:
        """Ramp the gain to zero. The oscillator keeps running."""
        if self.stream is None:
            return
        with self._lock:
            self._gain_target = 0.0
        if self.state == ToneState.PLAYING:
            self.state = ToneState.MUTED

    def resume(self) -> bool:
        """Restart a suspended stream, e.g. after a user gesture. Returns True if restarted."""
        if self.stream is None or self.state == ToneState.UNAVAILABLE:
            return False
        if self.stream.active:
            return False
        try:
            self.stream.start()
        except Exception as e:
            log_event("WARN", "Audio", "Could not resume output", error=e)
            return False
        log_event("INFO", "Audio", "Output resumed")
        return True

    def close(self) -> None:
        """Stop and release the output stream (application teardown)."""
        if self.stream is None:
            return
        try:
            self.stream.stop()
            self.stream.close()
        except Exception as e:
            log_event("WARN", "Audio", "Error while closing output", error=e)
        self.stream = None
        self._oscillator_started = False
        self.state = ToneState.UNINITIALIZED
        log_event("INFO", "Audio", "Stopped")

    def render_block(self, frames: int) -> np.ndarray:
        """Synthesize the next `frames` mono samples and advance oscillator state."""
        with self._lock:
            phase = self._phase
            freq0, freq_target = self._frequency, self._frequency_target
            gain0, gain_target = self._gain, self._gain_target

        if frames <= 0:
            return np.zeros(0, dtype=np.float32)

        tau = self.config.smoothing_time_s * self.sample_rate
        if tau > 0:
            decay = np.exp(-np.arange(1, frames + 1) / tau)
        else:
            decay = np.zeros(frames)
        freqs = freq_target + (freq0 - freq_target) * decay
        gains = gain_target + (gain0 - gain_target) * decay

        increments = 2.0 * math.pi * freqs / self.sample_rate
        advanced = np.cumsum(increments)
        phases = phase + advanced - increments
        samples = (gains * np.sin(phases)).astype(np.float32)

        with self._lock:
            self._phase = float((phase + advanced[-1]) % (2.0 * math.pi))
            self._frequency = float(freqs[-1])
            self._gain = float(gains[-1])
        return samples

    def _audio_callback(self, outdata, frames, time_info, status):
        """sounddevice callback - fill the output buffer"""
        if status:
            log_event("DEBUG", "Audio", "Stream status", status=status)
        outdata[:, 0] = self.render_block(frames)
