from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Sequence

from .audio import sequence, step_frequencies, wav_bytes
from .models import Settings

BASE_STEP_DURATION = 0.8


class Player:
	"""Fire-and-forget playback. Renders WAV bytes and hands them to ``sink``.

	A request made while the previous one's nominal duration has not elapsed is
	dropped, not queued.
	"""

	def __init__(
		self,
		sink: Callable[[bytes], None],
		settings: Optional[Settings] = None,
		clock: Callable[[], float] = time.monotonic,
	) -> None:
		self.sink = sink
		self.settings = settings or Settings()
		self.clock = clock
		self._busy_until = 0.0

	@property
	def is_playing(self) -> bool:
		return self.clock() < self._busy_until

	def play(self, frequency: float, duration: Optional[float] = None) -> bool:
		duration = duration if duration is not None else self.settings.note_duration
		return self.play_sequence([frequency], [duration])

	def play_sequence(self, freqs: Sequence[float], durations: Sequence[float]) -> bool:
		if self.is_playing or not freqs:
			return False
		x = sequence(freqs, durations, self.settings.waveform, self.settings.volume)
		self._busy_until = self.clock() + float(sum(durations))
		try:
			self.sink(wav_bytes(x))
		except Exception as e:
			logging.error(f"Playback failed: {e}")
		return True

	def play_steps(self, base_freq: float, target_freq: float, steps: int) -> bool:
		"""The base note, then every semitone up or down to the target."""
		freqs = step_frequencies(base_freq, target_freq, steps)
		durations = [BASE_STEP_DURATION] + [self.settings.step_duration] * (len(freqs) - 1)
		return self.play_sequence(freqs, durations)
