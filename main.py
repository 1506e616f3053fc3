"""
Cymatics - Main Application
Qt window with the plate canvas and the wave control panel.
"""

import sys
from typing import Optional

from PyQt6.QtCore import Qt, QTimer, pyqtSignal
from PyQt6.QtWidgets import (
    QApplication, QButtonGroup, QCheckBox, QHBoxLayout, QLabel, QMainWindow,
    QPushButton, QSlider, QVBoxLayout, QWidget, QFrame,
)

from audio_engine import ToneEngine
from auto_driver import AutoDriver
from config import Config, FieldMode, PARAM_RANGE_LIMITS
from config_persistence import load_config
from control_wiring import AudioSync, AutoDriverSync, apply_auto_tick, apply_user_change
from field_visualizer import FieldVisualizer
from logging_utils import log_event, set_log_level
from parameter_store import ParameterSnapshot, ParameterStore
from particle_system import ParticleSystem
from plate_canvas import PlateCanvas
from render_loop import RenderLoop


class SliderWithLabel(QWidget):
    """Slider with label showing current value"""

    valueChanged = pyqtSignal(float)

    def __init__(self, name: str, min_val: float, max_val: float,
                 default: float, decimals: int = 2, step: float = 0.0, parent=None):
        super().__init__(parent)

        self.min_val = min_val
        self.max_val = max_val
        self.decimals = decimals
        self.multiplier = 10 ** decimals

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        header = QHBoxLayout()

        self.label = QLabel(name)
        self.label.setStyleSheet("color: #cbd5e1;")

        self.value_label = QLabel(f"{default:.{decimals}f}")
        self.value_label.setAlignment(Qt.AlignmentFlag.AlignRight)
        self.value_label.setStyleSheet("color: #4ade80; font-family: monospace;")
        header.addWidget(self.label)
        header.addWidget(self.value_label)

        self.slider = QSlider(Qt.Orientation.Horizontal)
        self.slider.setMinimum(int(min_val * self.multiplier))
        self.slider.setMaximum(int(max_val * self.multiplier))
        if step > 0:
            self.slider.setSingleStep(int(step * self.multiplier))
            self.slider.setPageStep(int(step * self.multiplier))
        self.slider.setValue(int(round(default * self.multiplier)))
        self.slider.valueChanged.connect(self._on_change)

        layout.addLayout(header)
        layout.addWidget(self.slider)

    def _on_change(self, value: int):
        real_value = value / self.multiplier
        self.value_label.setText(f"{real_value:.{self.decimals}f}")
        self.valueChanged.emit(real_value)

    def value(self) -> float:
        return self.slider.value() / self.multiplier

    def set_value_silently(self, value: float):
        """Reflect an external write (auto sweep) without emitting valueChanged."""
        self.slider.blockSignals(True)
        self.slider.setValue(int(round(value * self.multiplier)))
        self.slider.blockSignals(False)
        self.value_label.setText(f"{value:.{self.decimals}f}")


class ControlsPanel(QFrame):
    """Wave controls: mode, frequencies, auto toggle, strength, sand amount, toggles."""

    def __init__(self, store: ParameterStore, tone_engine: ToneEngine, parent=None):
        super().__init__(parent)
        self.store = store
        self.tone_engine = tone_engine
        self.setFixedWidth(320)

        params = store.params
        flags = store.flags
        layout = QVBoxLayout(self)
        layout.setSpacing(14)

        title = QLabel("Wave Controls")
        title.setStyleSheet("font-size: 18px; font-weight: bold; color: #ffffff;")
        layout.addWidget(title)
        hint = QLabel("Adjust the standing wave parameters to see how constructive "
                      "and destructive interference forms geometry.")
        hint.setWordWrap(True)
        hint.setStyleSheet("color: #94a3b8; font-size: 11px;")
        layout.addWidget(hint)

        # Mode selection
        mode_row = QHBoxLayout()
        self.mode_group = QButtonGroup(self)
        self.plate_btn = QPushButton("Square Plate")
        self.source_btn = QPushButton("Dual Source")
        for btn, mode in ((self.plate_btn, FieldMode.CHLADNI), (self.source_btn, FieldMode.INTERFERENCE)):
            btn.setCheckable(True)
            btn.setChecked(params.mode == mode)
            btn.clicked.connect(lambda _checked, m=mode: apply_user_change(self.store, "mode", m))
            self.mode_group.addButton(btn)
            mode_row.addWidget(btn)
        layout.addLayout(mode_row)

        # Frequencies + auto toggle
        freq_header = QHBoxLayout()
        freq_label = QLabel("FREQUENCIES")
        freq_label.setStyleSheet("color: #64748b; font-size: 11px; font-weight: bold;")
        self.auto_btn = QPushButton()
        self.auto_btn.setCheckable(True)
        self.auto_btn.clicked.connect(self._on_auto_clicked)
        freq_header.addWidget(freq_label)
        freq_header.addStretch()
        freq_header.addWidget(self.auto_btn)
        layout.addLayout(freq_header)

        f_low, f_high = PARAM_RANGE_LIMITS['frequency_n']
        self.freq_n_slider = SliderWithLabel("Frequency N", f_low, f_high, params.frequency_n, 2)
        self.freq_n_slider.valueChanged.connect(lambda v: apply_user_change(self.store, "frequency_n", v))
        layout.addWidget(self.freq_n_slider)

        self.freq_m_slider = SliderWithLabel("Frequency M", f_low, f_high, params.frequency_m, 2)
        self.freq_m_slider.valueChanged.connect(lambda v: apply_user_change(self.store, "frequency_m", v))
        layout.addWidget(self.freq_m_slider)

        a_low, a_high = PARAM_RANGE_LIMITS['amplitude']
        self.amplitude_slider = SliderWithLabel("Vibration Strength (%)", a_low, a_high, params.amplitude, 0)
        self.amplitude_slider.valueChanged.connect(lambda v: apply_user_change(self.store, "amplitude", v))
        layout.addWidget(self.amplitude_slider)

        c_low, c_high = PARAM_RANGE_LIMITS['particle_count']
        self.count_slider = SliderWithLabel("Sand Amount", c_low, c_high, params.particle_count, 0, step=1000)
        self.count_slider.valueChanged.connect(lambda v: apply_user_change(self.store, "particle_count", int(v)))
        layout.addWidget(self.count_slider)

        self.field_cb = QCheckBox("See Force (node/antinode overlay)")
        self.field_cb.setChecked(flags.show_field)
        self.field_cb.toggled.connect(lambda on: self.store.update_flags(show_field=on))
        layout.addWidget(self.field_cb)

        self.audio_cb = QCheckBox("Sound")
        self.audio_cb.setChecked(flags.audio_enabled)
        self.audio_cb.toggled.connect(self._on_audio_toggled)
        layout.addWidget(self.audio_cb)

        layout.addStretch()
        self._refresh_auto_button(flags.auto_mode)
        self._unsubscribe = store.subscribe(self._on_store_change)

    def _on_auto_clicked(self, checked: bool):
        self.store.update_flags(auto_mode=checked)

    def _on_audio_toggled(self, on: bool):
        # Toggling sound is a user gesture; unlock a suspended output first
        self.tone_engine.resume()
        self.store.update_flags(audio_enabled=on)

    def _refresh_auto_button(self, auto_mode: bool):
        self.auto_btn.setChecked(auto_mode)
        self.auto_btn.setText("AUTO ON" if auto_mode else "AUTO OFF")
        self.auto_btn.setStyleSheet(
            "background-color: #22c55e;" if auto_mode else "background-color: #334155; color: #94a3b8;"
        )

    def _on_store_change(self, snapshot: ParameterSnapshot, changed: frozenset, source: str):
        params = snapshot.params
        if "frequency_n" in changed:
            self.freq_n_slider.set_value_silently(params.frequency_n)
        if "frequency_m" in changed:
            self.freq_m_slider.set_value_silently(params.frequency_m)
        if "auto_mode" in changed:
            self._refresh_auto_button(snapshot.flags.auto_mode)

    def detach(self):
        self._unsubscribe()


class CymaticsWindow(QMainWindow):
    """Main application window"""

    def __init__(self, config: Optional[Config] = None, tone_engine: Optional[ToneEngine] = None):
        super().__init__()

        self.setWindowTitle("Cymatics")
        self.setMinimumSize(640, 420)
        self.resize(1200, 800)
        self.setStyleSheet(self._get_stylesheet())

        self.config = config if config is not None else load_config()
        set_log_level(getattr(self.config, 'log_level', 'INFO'))

        self.store = ParameterStore(self.config.params, self.config.flags)
        self.tone_engine = tone_engine if tone_engine is not None else ToneEngine(self.config.audio)
        self.auto_driver = AutoDriver(base_speed=self.config.auto.base_speed)
        self.render_loop = RenderLoop(
            ParticleSystem(self.store.params.particle_count),
            FieldVisualizer(self.config.render.field_resolution),
            self.config.render,
        )

        # Setup UI
        central = QWidget()
        row = QHBoxLayout(central)
        row.setContentsMargins(12, 12, 12, 12)
        self.canvas = PlateCanvas(self.store, self.render_loop)
        self.controls = ControlsPanel(self.store, self.tone_engine)
        row.addWidget(self.canvas, 1)
        row.addWidget(self.controls)
        self.setCentralWidget(central)

        # Reactive wiring
        self.audio_sync = AudioSync(self.store, self.tone_engine)
        self.auto_sync = AutoDriverSync(self.store, self.auto_driver)
        self.audio_sync.refresh()

        # Render timer (one frame per tick)
        self.render_timer = QTimer(self)
        self.render_timer.setTimerType(Qt.TimerType.PreciseTimer)
        self.render_timer.timeout.connect(self.canvas.update)
        self.render_timer.start(self.config.render.frame_interval_ms)

        # Auto-driver timer, independent of the render timer
        self.auto_timer = QTimer(self)
        self.auto_timer.setTimerType(Qt.TimerType.PreciseTimer)
        self.auto_timer.timeout.connect(self._on_auto_tick)
        self.auto_timer.start(self.config.auto.tick_interval_ms)

        log_event("INFO", "UI", "Window ready",
                  particles=self.store.params.particle_count,
                  mode=self.store.params.mode.value,
                  auto=self.store.flags.auto_mode)

    def _on_auto_tick(self):
        apply_auto_tick(self.store, self.auto_driver)

    def _get_stylesheet(self) -> str:
        """Slate dark theme"""
        return """
            QMainWindow, QWidget {
                background-color: #020617;
                color: #e2e8f0;
            }

            QFrame {
                background-color: #0f172a;
                color: #e2e8f0;
            }

            QPushButton {
                background-color: #1e293b;
                color: #94a3b8;
                border: none;
                border-radius: 6px;
                padding: 6px 12px;
            }

            QPushButton:checked {
                background-color: #4f46e5;
                color: #ffffff;
            }

            QPushButton:hover {
                color: #ffffff;
            }

            QSlider::groove:horizontal {
                height: 6px;
                background: #334155;
                border-radius: 3px;
            }

            QSlider::handle:horizontal {
                background: #4ade80;
                width: 14px;
                margin: -5px 0;
                border-radius: 7px;
            }

            QCheckBox {
                color: #cbd5e1;
            }
        """

    def closeEvent(self, event):
        """Cleanup on close - stop timers before the widgets go away"""
        self.render_timer.stop()
        self.auto_timer.stop()
        self.auto_driver.disable()
        self.audio_sync.detach()
        self.auto_sync.detach()
        self.controls.detach()
        self.render_loop.stop()
        self.tone_engine.close()
        event.accept()


def main():
    """Main entry point - backup if not launched via run.py"""
    app = QApplication(sys.argv)
    app.setStyle('Fusion')
    window = CymaticsWindow()
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
