from auto_driver import AutoDriver
from frequency_utils import amplitude_to_volume
from parameter_store import SOURCE_AUTO, SOURCE_USER, ParameterSnapshot, ParameterStore

FREQUENCY_KEYS = frozenset({"frequency_m", "frequency_n"})
AUDIO_KEYS = frozenset({"frequency_m", "frequency_n", "amplitude", "audio_enabled"})


def apply_user_change(store: ParameterStore, key: str, value) -> frozenset:
    """Apply a control panel edit. Touching a frequency turns auto mode off first."""
    if key in FREQUENCY_KEYS and store.flags.auto_mode:
        store.update_flags(source=SOURCE_USER, auto_mode=False)
    return store.update_params(source=SOURCE_USER, **{key: value})


def apply_auto_tick(store: ParameterStore, driver: AutoDriver) -> bool:
    """Advance the auto-driver and write its frequencies. Returns False while disabled."""
    values = driver.tick()
    if values is None:
        return False
    freq_n, freq_m = values
    store.update_params(source=SOURCE_AUTO, frequency_n=freq_n, frequency_m=freq_m)
    return True


def sync_auto_driver(driver: AutoDriver, auto_mode: bool) -> None:
    """Enable/disable the driver to match the auto mode flag."""
    driver.set_enabled(auto_mode)


def apply_audio_state(tone_engine, snapshot: ParameterSnapshot) -> None:
    """Play the tone for the current parameters, or ramp it out."""
    params = snapshot.params
    if snapshot.flags.audio_enabled and params.amplitude > 0:
        volume = amplitude_to_volume(params.amplitude)
        tone_engine.play_tone(params.frequency_m, params.frequency_n, volume)
    else:
        tone_engine.stop_tone()


class AudioSync:
    """Keeps the tone engine in step with the audio-relevant parameters."""

    def __init__(self, store: ParameterStore, tone_engine):
        self.store = store
        self.tone_engine = tone_engine
        self._unsubscribe = store.subscribe(self._on_change, keys=AUDIO_KEYS)

    def _on_change(self, snapshot: ParameterSnapshot, changed: frozenset, source: str) -> None:
        apply_audio_state(self.tone_engine, snapshot)

    def refresh(self) -> None:
        apply_audio_state(self.tone_engine, self.store.snapshot())

    def detach(self) -> None:
        self._unsubscribe()


class AutoDriverSync:
    """Follows the auto_mode flag, so a manual frequency edit stops the sweep."""

    def __init__(self, store: ParameterStore, driver: AutoDriver):
        self.store = store
        self.driver = driver
        sync_auto_driver(driver, store.flags.auto_mode)
        self._unsubscribe = store.subscribe(self._on_change, keys=("auto_mode",))

    def _on_change(self, snapshot: ParameterSnapshot, changed: frozenset, source: str) -> None:
        sync_auto_driver(self.driver, snapshot.flags.auto_mode)

    def detach(self) -> None:
        self._unsubscribe()
