from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np

from .models import Accidental, Exercise, Note, Settings, StaffNote
from .proficiency import choose_interval
from .theory import (
	ALLOWED_ACCIDENTALS,
	STAFF_NOTES,
	descending_name,
	find_staff_note,
	interval_name_for_semitones,
	max_displayable_pitch,
	semitones_of,
	spell_pitch,
	staff_to_note,
)

# Catalog rows used for base notes (E5 down to C4), leaving room above for intervals
MIN_BASE_INDEX = 3
MAX_BASE_INDEX = 12
SAFE_BASE_INDEX = 7


def make_base_note(
	rng: Optional[np.random.Generator] = None,
	accidental_chance: float = 0.3,
	catalog: Sequence[StaffNote] = STAFF_NOTES,
	index: Optional[int] = None,
) -> Note:
	rng = rng if rng is not None else np.random.default_rng()
	if index is None:
		index = int(rng.integers(MIN_BASE_INDEX, MAX_BASE_INDEX + 1))
	if not 0 <= index < len(catalog):
		logging.error(f"Invalid base note index: {index}, max valid index is {len(catalog) - 1}")
		index = min(SAFE_BASE_INDEX, len(catalog) - 1)
	entry = catalog[index]
	accidental: Accidental = "natural"
	if rng.random() < accidental_chance:
		choices = ALLOWED_ACCIDENTALS[entry.letter]
		accidental = choices[int(rng.integers(len(choices)))]
	return staff_to_note(entry, accidental)


def make_exercise(interval: str, base: Note, catalog: Sequence[StaffNote] = STAFF_NOTES) -> Optional[Exercise]:
	"""Place ``interval`` above ``base``, or below it when above would run off the staff.

	Returns None when the target pitch has no row on the staff; the caller should
	draw a fresh exercise.
	"""
	d = semitones_of(interval)
	base_pitch = base.chromatic_pitch
	target_pitch = base_pitch + d
	direction = "above"
	if target_pitch > max_displayable_pitch(catalog):
		target_pitch = base_pitch - d
		direction = "below"
	target = spell_pitch(target_pitch)
	if find_staff_note(target.letter, target.octave, catalog) is None:
		logging.warning(f"Could not find note {target.letter}{target.octave} in mapping")
		return None
	semitones = abs(target.chromatic_pitch - base_pitch)
	name = interval_name_for_semitones(semitones)
	return Exercise(
		base_note=base,
		target_note=target,
		interval=interval,
		name=name if direction == "above" else descending_name(name),
		direction=direction,
		semitones=semitones,
	)


def generate_exercise(
	level: str,
	rng: Optional[np.random.Generator] = None,
	settings: Optional[Settings] = None,
	catalog: Sequence[StaffNote] = STAFF_NOTES,
) -> Optional[Exercise]:
	rng = rng if rng is not None else np.random.default_rng()
	settings = settings or Settings()
	for _ in range(settings.max_generation_attempts):
		interval = choose_interval(level, rng)
		base = make_base_note(rng, settings.accidental_chance, catalog)
		ex = make_exercise(interval, base, catalog)
		if ex is not None:
			return ex
	logging.error(f"Gave up generating an exercise after {settings.max_generation_attempts} attempts")
	return None


def is_correct(chosen: Note, target: Note) -> bool:
	return chosen.chromatic_pitch == target.chromatic_pitch
