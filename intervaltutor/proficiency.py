from __future__ import annotations

import logging
from typing import Dict, List, Optional

import numpy as np

from .ledger import accuracy_of, attempts_of
from .models import Level, Notice, ProgressLedger, Tier
from .theory import intervals_in_tier

PROFICIENCY_THRESHOLD = 0.80
MIN_ATTEMPTS = 10

LEVELS: List[Level] = ["easy", "medium", "hard", "mastery"]
LEVEL_RANK: Dict[str, int] = {level: i for i, level in enumerate(LEVELS)}

# Tiers that must each be mastered for a level to be open
PREREQUISITES: Dict[str, List[str]] = {
	"easy": [],
	"medium": ["easy"],
	"hard": ["easy", "medium"],
	"mastery": ["easy", "medium", "hard"],
}

# Sampling mix of exercise tiers per selected level
TIER_WEIGHTS: Dict[str, Dict[str, float]] = {
	"easy": {"easy": 1.0},
	"medium": {"medium": 0.8, "easy": 0.2},
	"hard": {"hard": 0.8, "medium": 0.1, "easy": 0.1},
	"mastery": {"hard": 1.0 / 3.0, "medium": 1.0 / 3.0, "easy": 1.0 / 3.0},
}

DISPLAY_NAMES: Dict[str, str] = {"easy": "Easy", "medium": "Medium", "hard": "Hard", "mastery": "Master"}


def level_display_name(level: str) -> str:
	return DISPLAY_NAMES.get(level, "")


def tier_mastered(ledger: ProgressLedger, tier: str) -> bool:
	return accuracy_of(ledger, tier) >= PROFICIENCY_THRESHOLD and attempts_of(ledger, tier) >= MIN_ATTEMPTS


def tier_slipping(ledger: ProgressLedger, tier: str) -> bool:
	"""Enough attempts to judge the tier, and accuracy has fallen under the threshold."""
	return accuracy_of(ledger, tier) < PROFICIENCY_THRESHOLD and attempts_of(ledger, tier) >= MIN_ATTEMPTS


def is_unlocked(ledger: ProgressLedger, level: str) -> bool:
	if level not in PREREQUISITES:
		return False
	return all(tier_mastered(ledger, tier) for tier in PREREQUISITES[level])


def highest_unlocked(ledger: ProgressLedger) -> Level:
	for level in reversed(LEVELS):
		if is_unlocked(ledger, level):
			return level
	return "easy"


def unlock_snapshot(ledger: ProgressLedger) -> Dict[str, bool]:
	return {level: is_unlocked(ledger, level) for level in LEVELS}


def next_unlockable_level(ledger: ProgressLedger) -> Optional[Level]:
	for level in LEVELS[1:]:
		if not is_unlocked(ledger, level):
			return level
	return None


def apply_transition(ledger: ProgressLedger) -> Optional[Level]:
	"""Move the persisted level one step up or down. Demotion is checked before advancement.

	Returns the new level, or None when the level is unchanged.
	"""
	current = ledger.proficiency_level
	new_level: Optional[Level] = None
	if current == "easy":
		if tier_mastered(ledger, "easy"):
			new_level = "medium"
	elif current == "medium":
		if tier_slipping(ledger, "easy"):
			new_level = "easy"
		elif tier_mastered(ledger, "medium"):
			new_level = "hard"
	elif current == "hard":
		if tier_slipping(ledger, "medium"):
			new_level = "medium"
		elif tier_mastered(ledger, "hard"):
			new_level = "mastery"
	elif current == "mastery":
		if tier_slipping(ledger, "hard"):
			new_level = "hard"
	if new_level is not None:
		ledger.proficiency_level = new_level
	return new_level


def validate_persisted_level(ledger: ProgressLedger) -> Optional[Level]:
	"""Drop the persisted level to the highest open level if it is no longer unlocked."""
	if is_unlocked(ledger, ledger.proficiency_level):
		return None
	ledger.proficiency_level = highest_unlocked(ledger)
	logging.info(f"Proficiency level lowered to {level_display_name(ledger.proficiency_level)}")
	return ledger.proficiency_level


def record_achieved(ledger: ProgressLedger, level: Level) -> bool:
	if LEVEL_RANK[level] <= LEVEL_RANK[ledger.highest_achieved_level]:
		return False
	ledger.highest_achieved_level = level
	return True


def select_tier(level: str, rng: Optional[np.random.Generator] = None) -> Tier:
	rng = rng if rng is not None else np.random.default_rng()
	weights = TIER_WEIGHTS.get(level)
	if weights is None:
		logging.warning(f"No tier mix for level {level!r}, defaulting to easy intervals")
		return "easy"
	tiers = list(weights.keys())
	idx = int(rng.choice(len(tiers), p=list(weights.values())))
	return tiers[idx]  # type: ignore[return-value]


def choose_interval(level: str, rng: Optional[np.random.Generator] = None) -> str:
	rng = rng if rng is not None else np.random.default_rng()
	names = intervals_in_tier(select_tier(level, rng))
	return names[int(rng.integers(len(names)))]


def tier_summary(ledger: ProgressLedger) -> List[Dict[str, object]]:
	"""Accuracy and attempts per tier, measured against the advancement threshold."""
	rows = []
	for tier in LEVELS[:-1]:
		rows.append({
			"tier": level_display_name(tier),
			"accuracy": accuracy_of(ledger, tier),
			"attempts": attempts_of(ledger, tier),
			"mastered": tier_mastered(ledger, tier),
		})
	return rows


def mastery_text(ledger: ProgressLedger) -> str:
	if ledger.proficiency_level == "mastery":
		return "You have achieved mastery level! All intervals will now be presented with equal frequency."
	return "Complete the Hard Level to reach Mastery."


def unlock_requirements(ledger: ProgressLedger, level: Optional[str]) -> str:
	"""What is still missing to open ``level``, judged on the tier just below it."""
	tier = {"medium": "easy", "hard": "medium", "mastery": "hard"}.get(level or "")
	if tier is None:
		return ""
	accuracy = round(accuracy_of(ledger, tier) * 100)
	attempts = attempts_of(ledger, tier)
	needs_accuracy = accuracy < PROFICIENCY_THRESHOLD * 100
	needs_attempts = attempts < MIN_ATTEMPTS
	target = round(PROFICIENCY_THRESHOLD * 100)
	name = level_display_name(tier)
	if needs_accuracy and needs_attempts:
		return f"Need {target}% accuracy on {name} intervals (currently {accuracy}%) and {MIN_ATTEMPTS} attempts (currently {attempts})."
	if needs_accuracy:
		return f"Need {target}% accuracy on {name} intervals (currently {accuracy}%)."
	if needs_attempts:
		return f"Need {MIN_ATTEMPTS} attempts on {name} intervals (currently {attempts})."
	return ""


def progress_message(ledger: ProgressLedger, selected_level: str, reached_mastery: bool = False) -> str:
	if reached_mastery:
		return "Congratulations! You've reached Master Level! You have demonstrated excellent understanding of musical intervals."
	if selected_level == "mastery":
		return "You're practicing at Master Level!"
	accuracy = accuracy_of(ledger, selected_level)
	msg = f"You're at {round(accuracy * 100)}% accuracy in {level_display_name(selected_level)} intervals."
	persisted = ledger.proficiency_level
	if selected_level == persisted and persisted != "mastery":
		next_name = level_display_name(LEVELS[LEVEL_RANK[persisted] + 1])
		attempts = attempts_of(ledger, selected_level)
		if accuracy >= PROFICIENCY_THRESHOLD and attempts < MIN_ATTEMPTS:
			msg += f" You need {MIN_ATTEMPTS - attempts} more practice attempts before advancing to {next_name}."
		else:
			msg += f" Reach {round(PROFICIENCY_THRESHOLD * 100)}% to advance to {next_name}!"
	return msg


class ProficiencyState:
	"""The persisted level lives on the ledger; the selected level is what is being practiced now."""

	def __init__(self, ledger: ProgressLedger) -> None:
		self.ledger = ledger
		validate_persisted_level(ledger)
		record_achieved(ledger, highest_unlocked(ledger))
		self.selected_level: Level = ledger.proficiency_level
		self.previously_unlocked = unlock_snapshot(ledger)
		self.pending_unlock: Optional[Level] = None

	@property
	def persisted_level(self) -> Level:
		return self.ledger.proficiency_level

	def is_unlocked(self, level: str) -> bool:
		return is_unlocked(self.ledger, level)

	def validate_selected_level(self) -> Optional[Notice]:
		if is_unlocked(self.ledger, self.selected_level):
			return None
		self.selected_level = highest_unlocked(self.ledger)
		name = level_display_name(self.selected_level)
		return Notice(
			kind="level_adjusted",
			level=self.selected_level,
			message=f"Your selected level has been adjusted to {name} because your performance in previous levels has dropped below the mastery threshold.",
		)

	def detect_unlocks(self) -> Optional[Notice]:
		now_unlocked = unlock_snapshot(self.ledger)
		fresh = [level for level in LEVELS[1:] if now_unlocked[level] and not self.previously_unlocked.get(level, False)]
		self.previously_unlocked = now_unlocked
		if not fresh:
			return None
		for level in fresh:
			record_achieved(self.ledger, level)
		level = fresh[0]
		self.pending_unlock = level
		logging.info(f"Level unlocked: {level_display_name(level)}")
		return Notice(
			kind="level_unlocked",
			level=level,
			message=f"Congratulations! You've unlocked the {level_display_name(level)} level with your excellent performance. The application will now switch to this new level.",
		)

	def after_answer(self) -> List[Notice]:
		"""Re-evaluate levels once the ledger has recorded an answer."""
		if self.selected_level == self.persisted_level:
			apply_transition(self.ledger)
		validate_persisted_level(self.ledger)
		notices = []
		adjusted = self.validate_selected_level()
		if adjusted is not None:
			notices.append(adjusted)
		unlocked = self.detect_unlocks()
		if unlocked is not None:
			notices.append(unlocked)
		return notices

	def change_level(self, level: Level) -> bool:
		if not is_unlocked(self.ledger, level):
			logging.warning(f"Attempted to select level that is not unlocked: {level}")
			return False
		self.selected_level = level
		return True

	def acknowledge_unlock(self) -> Optional[Level]:
		level = self.pending_unlock
		self.pending_unlock = None
		if level is not None and self.change_level(level):
			return level
		return None
