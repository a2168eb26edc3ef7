import io

import numpy as np
import pytest
import soundfile as sf

from intervaltutor.audio import SR, sequence, step_frequencies, tone, wav_bytes


def test_tone_length_and_dtype():
	dur = 0.5
	x = tone(440.0, dur, waveform="sine")
	assert isinstance(x, np.ndarray)
	assert x.dtype == np.float32
	assert len(x) == int(SR * dur)


def test_tone_volume_scales_peak():
	quiet = tone(440.0, 0.5, waveform="triangle", volume=0.25)
	assert np.max(np.abs(quiet)) <= 0.25 + 1e-6


def test_sequence_concatenates_notes():
	x = sequence([440.0, 660.0, 880.0], [0.8, 0.6, 0.6], waveform="saw")
	assert len(x) == int(SR * 0.8) + 2 * int(SR * 0.6)
	assert len(sequence([], [])) == 0
	with pytest.raises(ValueError):
		sequence([440.0], [0.5, 0.5])


def test_step_frequencies_end_on_target():
	freqs = step_frequencies(261.63, 392.00, 7)
	assert len(freqs) == 8
	assert freqs[0] == 261.63
	assert freqs[-1] == 392.00
	assert all(a < b for a, b in zip(freqs, freqs[1:]))
	assert step_frequencies(440.0, 440.0, 0) == [440.0]


def test_step_frequencies_descending():
	freqs = step_frequencies(440.0, 220.0, 12)
	assert freqs[6] == pytest.approx(440.0 / np.sqrt(2.0))
	assert freqs[-1] == 220.0


def test_wav_bytes_round_trip_length():
	x = tone(440.0, 0.25)
	data, sr = sf.read(io.BytesIO(wav_bytes(x)), dtype="float32")
	assert sr == SR
	assert len(data) == len(x)
