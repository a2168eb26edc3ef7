import pytest

from intervaltutor.models import Note
from intervaltutor.theory import (
	A4_FREQ,
	STAFF_NOTES,
	SEMITONE_RATIO,
	descending_name,
	interval_name_for_semitones,
	interval_names,
	intervals_in_tier,
	lowest_pitch,
	max_displayable_pitch,
	note_frequency,
	pitch_to_freq,
	semitones_of,
	spell_pitch,
	tier_of,
)


def test_catalog_covers_unison_to_octave():
	names = interval_names()
	assert len(names) == 13
	assert sorted(semitones_of(n) for n in names) == list(range(13))


def test_tiers_are_fixed():
	assert set(intervals_in_tier("easy")) == {"Unison", "Perfect Fourth", "Perfect Fifth", "Octave"}
	assert set(intervals_in_tier("medium")) == {"Major Second", "Major Third", "Major Sixth", "Major Seventh"}
	assert tier_of("Tritone") == "hard"
	assert tier_of("Minor Sixth") == "hard"
	assert len(intervals_in_tier("hard")) == 5


def test_unknown_interval_raises():
	with pytest.raises(KeyError):
		semitones_of("Augmented Ninth")
	with pytest.raises(KeyError):
		tier_of("Augmented Ninth")


def test_name_lookup_by_semitones():
	assert interval_name_for_semitones(6) == "Tritone"
	assert interval_name_for_semitones(13) == "Unknown Interval"
	assert descending_name("Major Third") == "Descending Major Third"


def test_chromatic_pitch_and_spelling():
	assert Note(letter="C", octave=4).chromatic_pitch == 48
	assert Note(letter="E", accidental="flat", octave=4).chromatic_pitch == 51
	assert spell_pitch(51) == Note(letter="D", accidental="sharp", octave=4)
	assert spell_pitch(70) == Note(letter="A", accidental="sharp", octave=5)


def test_display_range():
	assert lowest_pitch() == 48
	assert max_displayable_pitch() == 70
	assert len(STAFF_NOTES) == 13


def test_note_frequency_applies_accidentals():
	a4 = Note(letter="A", octave=4)
	assert note_frequency(a4) == A4_FREQ
	sharp = note_frequency(Note(letter="A", accidental="sharp", octave=4))
	flat = note_frequency(Note(letter="A", accidental="flat", octave=4))
	assert sharp == pytest.approx(A4_FREQ * SEMITONE_RATIO)
	assert flat == pytest.approx(A4_FREQ / SEMITONE_RATIO)


def test_note_frequency_outside_catalog():
	assert note_frequency(Note(letter="A", octave=3)) == pytest.approx(220.0)
	assert pitch_to_freq(57) == A4_FREQ
