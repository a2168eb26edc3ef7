from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field


Tier = Literal["easy", "medium", "hard"]
Level = Literal["easy", "medium", "hard", "mastery"]
Accidental = Literal["natural", "sharp", "flat"]
Letter = Literal["C", "D", "E", "F", "G", "A", "B"]
Direction = Literal["above", "below"]
Waveform = Literal["sine", "triangle", "saw"]

LETTER_SEMITONES = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}
ACCIDENTAL_OFFSETS = {"natural": 0, "sharp": 1, "flat": -1}
ACCIDENTAL_SYMBOLS = {"natural": "", "sharp": "♯", "flat": "♭"}


def _now() -> datetime:
	return datetime.now()


class Settings(BaseModel):
	waveform: Waveform = Field(default="triangle")
	volume: float = Field(default=0.9, ge=0.0, le=1.0)
	note_duration: float = Field(default=1.0, gt=0.0, le=5.0)
	step_duration: float = Field(default=0.6, gt=0.0, le=5.0)
	accidental_chance: float = Field(default=0.3, ge=0.0, le=1.0)
	max_generation_attempts: int = Field(default=25, ge=1, le=500)


class Note(BaseModel):
	letter: Letter
	accidental: Accidental = "natural"
	octave: int

	@property
	def chromatic_pitch(self) -> int:
		return LETTER_SEMITONES[self.letter] + ACCIDENTAL_OFFSETS[self.accidental] + 12 * self.octave

	def label(self) -> str:
		"""Display name with a proper accidental sign, e.g. ``F♯4``."""
		return f"{self.letter}{ACCIDENTAL_SYMBOLS[self.accidental]}{self.octave}"


class StaffNote(BaseModel):
	name: str
	letter: Letter
	octave: int
	kind: Literal["line", "space", "ledger"]
	position: int
	frequency: float


class IntervalStat(BaseModel):
	interval: str
	attempts: int = 0
	correct_attempts: int = 0
	last_practiced: datetime = Field(default_factory=_now)


class ProgressLedger(BaseModel):
	progress: List[IntervalStat] = Field(default_factory=list)
	total_exercises_completed: int = 0
	last_session_date: datetime = Field(default_factory=_now)
	proficiency_level: Level = "easy"
	highest_achieved_level: Level = "easy"
	easy_accuracy: float = 0.0
	medium_accuracy: float = 0.0
	hard_accuracy: float = 0.0


class User(BaseModel):
	id: str
	name: str
	created_at: datetime = Field(default_factory=_now)
	last_active: datetime = Field(default_factory=_now)
	interval_training: ProgressLedger = Field(default_factory=ProgressLedger)


class Exercise(BaseModel):
	base_note: Note
	target_note: Note
	interval: str
	name: str
	direction: Direction
	semitones: int


class Notice(BaseModel):
	kind: Literal["level_adjusted", "level_unlocked"]
	level: Level
	message: str


class AnswerFeedback(BaseModel):
	correct: bool
	interval: str
	semitones: Optional[int] = None
	message: str
