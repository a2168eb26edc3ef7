SR = 44100

import io
from typing import List, Sequence, cast
import numpy as np
import numpy.typing as npt
import soundfile as sf


def tone(freq: float, dur: float, waveform: str = "sine", volume: float = 1.0) -> npt.NDArray[np.float32]:
	"""Generate a single tone with a simple attack/release envelope.

	Args:
		freq: Frequency in Hz
		dur: Duration in seconds
		waveform: One of {"sine","triangle","saw"}
		volume: Peak amplitude in [0, 1]
	"""
	t = np.linspace(0.0, dur, int(SR * dur), endpoint=False, dtype=np.float32)
	omega = 2.0 * np.pi * freq
	if waveform == "sine":
		x = np.sin(omega * t).astype(np.float32)
	elif waveform == "triangle":
		# 2/pi * arcsin(sin)
		x = ((2.0 / np.pi) * np.arcsin(np.sin(omega * t))).astype(np.float32)
	else:
		phase = (freq * t).astype(np.float32)
		x = (2.0 * (phase - np.floor(phase + 0.5))).astype(np.float32)

	# 5ms attack, release over the last fifth of the note
	attack = min(int(0.005 * SR), x.size)
	release = min(int(0.2 * x.size), x.size - attack)
	env = np.ones_like(x, dtype=np.float32)
	if attack > 0:
		env[:attack] = np.linspace(0.0, 1.0, attack, endpoint=False, dtype=np.float32)
	if release > 0:
		env[-release:] = np.linspace(1.0, 0.0, release, endpoint=False, dtype=np.float32)

	y = (x * env * np.float32(volume)).astype(np.float32)
	return cast(npt.NDArray[np.float32], y)


def sequence(freqs: Sequence[float], durations: Sequence[float], waveform: str = "sine", volume: float = 1.0) -> npt.NDArray[np.float32]:
	"""Play ``freqs`` one after another, each for its matching duration."""
	if len(freqs) != len(durations):
		raise ValueError("freqs and durations must have the same length")
	if not freqs:
		return np.zeros(0, dtype=np.float32)
	return np.concatenate([tone(f, d, waveform, volume) for f, d in zip(freqs, durations)])


def step_frequencies(base_freq: float, target_freq: float, steps: int) -> List[float]:
	"""Frequencies walking from base to target in ``steps`` equal ratios; the last one is exactly the target."""
	if steps <= 0:
		return [base_freq]
	ratio = (target_freq / base_freq) ** (1.0 / steps)
	freqs = [base_freq * ratio ** i for i in range(steps)]
	freqs.append(target_freq)
	return [float(f) for f in freqs]


def wav_bytes(x: npt.NDArray[np.float32]) -> bytes:
	buf = io.BytesIO()
	sf.write(buf, x, SR, format="WAV")
	return buf.getvalue()
