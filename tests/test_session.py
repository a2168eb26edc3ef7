import numpy as np
import pytest

from intervaltutor import session as session_mod
from intervaltutor.ledger import attempts_of, recompute_accuracies
from intervaltutor.models import Note, Settings
from intervaltutor.playback import Player
from intervaltutor.session import TrainingSession
from intervaltutor.storage import UserStore
from intervaltutor.theory import spell_pitch
from intervaltutor.trainer import make_exercise


class FailingStore(UserStore):
	def save_user(self, user):
		return False


@pytest.fixture
def store(tmp_path):
	return UserStore(tmp_path / "data.json")


@pytest.fixture
def played():
	return []


@pytest.fixture
def session(store, played):
	user = store.create_user("Ada")
	s = TrainingSession(store, Player(played.append), Settings(), rng=np.random.default_rng(11))
	assert s.load_user(user.id)
	return s


def wrong_note(target: Note) -> Note:
	return spell_pitch(target.chromatic_pitch + 1)


def answer(s: TrainingSession, correct: bool):
	target = s.exercise.target_note
	s.select_note(target if correct else wrong_note(target))
	return s.submit_answer()


def test_no_user_means_no_ops(store):
	s = TrainingSession(store)
	assert not s.load_user("missing")
	assert s.submit_answer() is None
	assert s.give_up() is None
	assert not s.change_level("easy")
	assert not s.play_base()
	assert s.new_exercise() is None


def test_submit_requires_selected_note(session):
	assert session.exercise is not None
	assert session.submit_answer() is None
	assert session.user.interval_training.total_exercises_completed == 0


def test_correct_answer_records_and_saves(session, store):
	ex = session.exercise
	fb = answer(session, True)
	assert fb.correct
	assert fb.semitones == ex.semitones
	assert fb.message.startswith(f"Correct! The interval is a {ex.name} ({ex.semitones} semitones).")
	assert session.selected_note is None
	reloaded = store.load_user(session.user.id)
	stat = next(st_i for st_i in reloaded.interval_training.progress if st_i.interval == ex.interval)
	assert stat.attempts == 1 and stat.correct_attempts == 1

	session.close_feedback()
	assert session.feedback is None
	assert session.exercise is not None


def test_incorrect_answer_keeps_exercise(session):
	ex = session.exercise
	fb = answer(session, False)
	assert not fb.correct
	assert fb.message == "Incorrect. Try again!"
	chosen = session.selected_note
	session.close_feedback()
	assert session.exercise is ex
	assert session.selected_note == chosen


def test_enharmonic_spelling_is_accepted(session):
	session.exercise = make_exercise("Minor Third", Note(letter="C", octave=4))
	session.select_note(Note(letter="E", accidental="flat", octave=4))
	assert session.submit_answer().correct


def test_give_up_counts_a_miss(session):
	first = session.exercise
	session.give_up()
	ledger = session.user.interval_training
	stat = next(st_i for st_i in ledger.progress if st_i.interval == first.interval)
	assert stat.attempts == 1 and stat.correct_attempts == 0
	assert session.exercise is not None


def test_unlocking_medium_then_switching(session):
	ledger = session.user.interval_training
	for _ in range(10):
		answer(session, True)
		session.close_feedback()
	assert attempts_of(ledger, "easy") == 10
	assert ledger.proficiency_level == "medium"
	assert session.level_unlocked is not None and session.level_unlocked.level == "medium"
	assert session.selected_level == "easy"

	assert session.acknowledge_unlock() == "medium"
	assert session.selected_level == "medium"
	assert session.level_unlocked is None
	assert session.exercise is not None


def test_collapse_raises_adjustment_notice(store):
	user = store.create_user("Bo")
	ledger = user.interval_training
	for st_i in ledger.progress:
		if st_i.interval == "Unison":
			st_i.attempts, st_i.correct_attempts = 10, 8
		if st_i.interval == "Major Third":
			st_i.attempts, st_i.correct_attempts = 10, 10
	recompute_accuracies(ledger)
	ledger.proficiency_level = "hard"
	store.save_user(user)

	s = TrainingSession(store, rng=np.random.default_rng(2))
	s.load_user(user.id)
	assert s.selected_level == "hard"
	s.exercise = make_exercise("Unison", Note(letter="C", octave=4))
	answer(s, False)
	assert s.level_adjusted is not None and s.level_adjusted.level == "easy"
	assert s.selected_level == "easy"
	assert s.user.interval_training.proficiency_level == "easy"
	assert s.user.interval_training.highest_achieved_level == "hard"
	s.dismiss_adjustment()
	assert s.level_adjusted is None


def test_save_failure_is_not_surfaced(tmp_path):
	store = FailingStore(tmp_path / "data.json")
	user = UserStore(tmp_path / "data.json").create_user("Cy")
	s = TrainingSession(store, rng=np.random.default_rng(4))
	assert s.load_user(user.id)
	fb = answer(s, True)
	assert fb.correct
	assert s.user.interval_training.total_exercises_completed == 1


def test_generation_failure_leaves_null_exercise(session, monkeypatch):
	def boom(*args, **kwargs):
		raise RuntimeError("generator broke")

	answer(session, True)
	monkeypatch.setattr(session_mod, "generate_exercise", boom)
	session.close_feedback()
	assert session.exercise is None
	assert session.submit_answer() is None
	assert not session.play_target()


def test_locked_level_change_is_refused(session):
	ex = session.exercise
	assert not session.change_level("hard")
	assert session.exercise is ex
	assert session.change_level("easy")


def test_playback_cooldown(session, played):
	assert session.play_base()
	assert not session.play_target()
	assert len(played) == 1


def test_clear_selection_blocks_submit(session):
	session.select_note(session.exercise.target_note)
	session.clear_selection()
	assert session.submit_answer() is None


def test_hint_steps_are_clamped(session):
	assert session.hint_lines() == []
	assert session.show_hint() == 1
	assert session.previous_hint() == 1
	assert session.next_hint() == 2
	assert session.next_hint() == 3
	assert session.next_hint() == 3
	session.close_hint()
	assert session.hint_level is None
	assert session.next_hint() is None


def test_hint_reveals_name_then_note(session):
	session.exercise = make_exercise("Minor Third", Note(letter="C", octave=4))
	session.show_hint()
	assert "steps" in session.hint_lines()[0]
	session.next_hint()
	assert session.hint_lines() == [
		"This interval is a Minor Third.",
		"There are 3 semitones between these notes.",
	]
	session.next_hint()
	assert session.hint_lines() == ["The note is D♯4."]


def test_new_exercise_closes_hint(session):
	session.show_hint()
	session.give_up()
	assert session.hint_level is None


def test_hint_needs_an_exercise(store):
	assert TrainingSession(store).show_hint() is None
