from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from .models import ACCIDENTAL_OFFSETS, Accidental, Note, StaffNote, Tier

SEMITONES: Dict[str, int] = {
	"Unison": 0,
	"Minor Second": 1,
	"Major Second": 2,
	"Minor Third": 3,
	"Major Third": 4,
	"Perfect Fourth": 5,
	"Tritone": 6,
	"Perfect Fifth": 7,
	"Minor Sixth": 8,
	"Major Sixth": 9,
	"Minor Seventh": 10,
	"Major Seventh": 11,
	"Octave": 12,
}

TIERS: Dict[str, List[str]] = {
	"easy": ["Unison", "Perfect Fourth", "Perfect Fifth", "Octave"],
	"medium": ["Major Second", "Major Third", "Major Sixth", "Major Seventh"],
	"hard": ["Minor Second", "Minor Third", "Minor Sixth", "Minor Seventh", "Tritone"],
}

_TIER_BY_INTERVAL: Dict[str, str] = {name: tier for tier, names in TIERS.items() for name in names}

# Chromatic position within an octave -> spelling, sharps preferred
CHROMATIC_SPELLINGS: List[Tuple[str, Accidental]] = [
	("C", "natural"),
	("C", "sharp"),
	("D", "natural"),
	("D", "sharp"),
	("E", "natural"),
	("F", "natural"),
	("F", "sharp"),
	("G", "natural"),
	("G", "sharp"),
	("A", "natural"),
	("A", "sharp"),
	("B", "natural"),
]

# C-flat, F-flat, B-sharp and E-sharp are never written
ALLOWED_ACCIDENTALS: Dict[str, List[Accidental]] = {
	"C": ["sharp"],
	"D": ["sharp", "flat"],
	"E": ["flat"],
	"F": ["sharp"],
	"G": ["sharp", "flat"],
	"A": ["sharp", "flat"],
	"B": ["flat"],
}

A4_PITCH = 57
A4_FREQ = 440.0
SEMITONE_RATIO = 2.0 ** (1.0 / 12.0)

# Treble clef, top to bottom. Position counts half line-spacings below the top line.
STAFF_NOTES: List[StaffNote] = [
	StaffNote(name="A5", letter="A", octave=5, kind="ledger", position=-2, frequency=880.00),
	StaffNote(name="G5", letter="G", octave=5, kind="space", position=-1, frequency=783.99),
	StaffNote(name="F5", letter="F", octave=5, kind="line", position=0, frequency=698.46),
	StaffNote(name="E5", letter="E", octave=5, kind="space", position=1, frequency=659.25),
	StaffNote(name="D5", letter="D", octave=5, kind="line", position=2, frequency=587.33),
	StaffNote(name="C5", letter="C", octave=5, kind="space", position=3, frequency=523.25),
	StaffNote(name="B4", letter="B", octave=4, kind="line", position=4, frequency=493.88),
	StaffNote(name="A4", letter="A", octave=4, kind="space", position=5, frequency=440.00),
	StaffNote(name="G4", letter="G", octave=4, kind="line", position=6, frequency=392.00),
	StaffNote(name="F4", letter="F", octave=4, kind="space", position=7, frequency=349.23),
	StaffNote(name="E4", letter="E", octave=4, kind="line", position=8, frequency=329.63),
	StaffNote(name="D4", letter="D", octave=4, kind="space", position=9, frequency=293.66),
	StaffNote(name="C4", letter="C", octave=4, kind="ledger", position=10, frequency=261.63),
]


def interval_names() -> List[str]:
	return list(SEMITONES.keys())


def semitones_of(name: str) -> int:
	return SEMITONES[name]


def tier_of(name: str) -> Tier:
	return _TIER_BY_INTERVAL[name]  # type: ignore[return-value]


def intervals_in_tier(tier: str) -> List[str]:
	return list(TIERS[tier])


def interval_name_for_semitones(semitones: int) -> str:
	for name, d in SEMITONES.items():
		if d == semitones:
			return name
	return "Unknown Interval"


def descending_name(name: str) -> str:
	return f"Descending {name}"


def spell_pitch(pitch: int) -> Note:
	"""Spell an absolute chromatic pitch using the sharps-preferring table."""
	octave, position = divmod(pitch, 12)
	letter, accidental = CHROMATIC_SPELLINGS[position]
	return Note(letter=letter, accidental=accidental, octave=octave)


def find_staff_note(letter: str, octave: int, catalog: Sequence[StaffNote] = STAFF_NOTES) -> Optional[StaffNote]:
	for entry in catalog:
		if entry.letter == letter and entry.octave == octave:
			return entry
	return None


def staff_to_note(entry: StaffNote, accidental: Accidental = "natural") -> Note:
	return Note(letter=entry.letter, accidental=accidental, octave=entry.octave)


def lowest_pitch(catalog: Sequence[StaffNote] = STAFF_NOTES) -> int:
	return min(staff_to_note(e).chromatic_pitch for e in catalog)


def max_displayable_pitch(catalog: Sequence[StaffNote] = STAFF_NOTES) -> int:
	"""Highest pitch the staff can show: the top catalog note written sharp."""
	return max(staff_to_note(e).chromatic_pitch for e in catalog) + 1


def pitch_to_freq(pitch: int) -> float:
	return float(A4_FREQ * (2.0 ** ((pitch - A4_PITCH) / 12.0)))


def note_frequency(note: Note, catalog: Sequence[StaffNote] = STAFF_NOTES) -> float:
	"""Frequency of ``note`` from the catalog's natural reference, shifted by a semitone for accidentals."""
	entry = find_staff_note(note.letter, note.octave, catalog)
	if entry is None:
		return pitch_to_freq(note.chromatic_pitch)
	return float(entry.frequency * SEMITONE_RATIO ** ACCIDENTAL_OFFSETS[note.accidental])
