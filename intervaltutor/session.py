from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np

from .ledger import ensure_complete, record
from .models import AnswerFeedback, Exercise, Level, Note, Notice, Settings, User
from .playback import Player
from .proficiency import ProficiencyState, progress_message
from .storage import UserStore
from .theory import note_frequency
from .trainer import generate_exercise, is_correct

HINT_STEPS = 3
STEPS_HINT = "Listen to the steps between the base note and interval note to help identify the interval."


class TrainingSession:
	"""One user's practice session. Every call runs to completion before the next.

	Calls made without a user, an exercise or a selected note return quietly.
	"""

	def __init__(
		self,
		store: UserStore,
		player: Optional[Player] = None,
		settings: Optional[Settings] = None,
		rng: Optional[np.random.Generator] = None,
	) -> None:
		self.store = store
		self.player = player
		self.settings = settings or Settings()
		self.rng = rng if rng is not None else np.random.default_rng()
		self.user: Optional[User] = None
		self.state: Optional[ProficiencyState] = None
		self.exercise: Optional[Exercise] = None
		self.selected_note: Optional[Note] = None
		self.feedback: Optional[AnswerFeedback] = None
		self.level_adjusted: Optional[Notice] = None
		self.level_unlocked: Optional[Notice] = None
		self.hint_level: Optional[int] = None

	@property
	def selected_level(self) -> Optional[Level]:
		return self.state.selected_level if self.state else None

	def load_user(self, user_id: str) -> bool:
		user = self.store.load_user(user_id)
		if user is None:
			logging.warning(f"No profile with id {user_id}")
			return False
		self.start(user)
		return True

	def start(self, user: User) -> None:
		ensure_complete(user.interval_training)
		self.user = user
		self.state = ProficiencyState(user.interval_training)
		self.exercise = None
		self.selected_note = None
		self.feedback = None
		self.level_adjusted = None
		self.level_unlocked = None
		self.hint_level = None
		self._save()
		self.new_exercise()

	def _save(self) -> bool:
		if self.user is None:
			return False
		ok = self.store.save_user(self.user)
		if not ok:
			logging.warning("Progress kept in memory only; the next save will retry")
		return ok

	def new_exercise(self) -> Optional[Exercise]:
		if self.state is None or self.feedback is not None:
			return None
		try:
			self.exercise = generate_exercise(self.state.selected_level, self.rng, self.settings)
		except Exception as e:
			logging.error(f"Error generating new exercise: {e}")
			self.exercise = None
		self.selected_note = None
		self.hint_level = None
		return self.exercise

	def select_note(self, note: Note) -> None:
		if self.exercise is None:
			return
		self.selected_note = note

	def clear_selection(self) -> None:
		self.selected_note = None

	def _score(self, was_correct: bool) -> List[Notice]:
		record(self.user.interval_training, self.exercise.interval, was_correct)
		notices = self.state.after_answer()
		for notice in notices:
			if notice.kind == "level_adjusted":
				self.level_adjusted = notice
			else:
				self.level_unlocked = notice
		self._save()
		return notices

	def submit_answer(self) -> Optional[AnswerFeedback]:
		if self.user is None or self.state is None or self.exercise is None or self.selected_note is None:
			return None
		ex = self.exercise
		correct = is_correct(self.selected_note, ex.target_note)
		ledger = self.user.interval_training
		previous_level = ledger.proficiency_level
		self._score(correct)
		if correct:
			reached_mastery = previous_level != "mastery" and ledger.proficiency_level == "mastery"
			progress = progress_message(ledger, self.state.selected_level, reached_mastery)
			self.feedback = AnswerFeedback(
				correct=True,
				interval=ex.name,
				semitones=ex.semitones,
				message=f"Correct! The interval is a {ex.name} ({ex.semitones} semitones).\n\n{progress}",
			)
			self.selected_note = None
		else:
			self.feedback = AnswerFeedback(correct=False, interval=ex.name, message="Incorrect. Try again!")
		return self.feedback

	def close_feedback(self) -> None:
		feedback = self.feedback
		self.feedback = None
		if feedback is not None and feedback.correct:
			self.new_exercise()

	def give_up(self) -> Optional[Exercise]:
		"""Count the current exercise as missed and move on."""
		if self.user is None or self.state is None or self.exercise is None:
			return None
		logging.info(f"Gave up on {self.exercise.name} interval - counted as failed attempt")
		self._score(False)
		self.feedback = None
		return self.new_exercise()

	def change_level(self, level: Level) -> bool:
		if self.state is None:
			return False
		if not self.state.change_level(level):
			return False
		self.feedback = None
		self.new_exercise()
		return True

	def acknowledge_unlock(self) -> Optional[Level]:
		self.level_unlocked = None
		if self.state is None:
			return None
		level = self.state.acknowledge_unlock()
		if level is not None:
			self.feedback = None
			self.new_exercise()
		return level

	def dismiss_adjustment(self) -> None:
		self.level_adjusted = None

	def show_hint(self) -> Optional[int]:
		if self.exercise is None:
			return None
		self.hint_level = 1
		return self.hint_level

	def next_hint(self) -> Optional[int]:
		if self.hint_level is not None and self.hint_level < HINT_STEPS:
			self.hint_level += 1
		return self.hint_level

	def previous_hint(self) -> Optional[int]:
		if self.hint_level is not None and self.hint_level > 1:
			self.hint_level -= 1
		return self.hint_level

	def close_hint(self) -> None:
		self.hint_level = None

	def hint_lines(self) -> List[str]:
		"""What the current hint step reveals. Step 1 only offers the semitone walk."""
		ex = self.exercise
		if ex is None or self.hint_level is None:
			return []
		if self.hint_level == 1:
			return [STEPS_HINT]
		if self.hint_level == 2:
			return [
				f"This interval is a {ex.name}.",
				f"There are {abs(ex.semitones)} semitones between these notes.",
			]
		return [f"The note is {ex.target_note.label()}."]

	def play_base(self) -> bool:
		if self.player is None or self.exercise is None:
			return False
		return self.player.play(note_frequency(self.exercise.base_note))

	def play_target(self) -> bool:
		if self.player is None or self.exercise is None:
			return False
		return self.player.play(note_frequency(self.exercise.target_note))

	def play_steps(self) -> bool:
		if self.player is None or self.exercise is None:
			return False
		ex = self.exercise
		return self.player.play_steps(note_frequency(ex.base_note), note_frequency(ex.target_note), ex.semitones)
