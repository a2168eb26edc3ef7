from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from .models import IntervalStat, ProgressLedger
from .theory import TIERS, interval_names, tier_of


def new_ledger(now: Optional[datetime] = None) -> ProgressLedger:
	now = now or datetime.now()
	return ProgressLedger(
		progress=[IntervalStat(interval=name, last_practiced=now) for name in interval_names()],
		last_session_date=now,
	)


def _stat(ledger: ProgressLedger, interval: str) -> Optional[IntervalStat]:
	for st_i in ledger.progress:
		if st_i.interval == interval:
			return st_i
	return None


def ensure_complete(ledger: ProgressLedger) -> ProgressLedger:
	"""Backfill stat rows missing from older records and refresh the tier accuracies."""
	for name in interval_names():
		if _stat(ledger, name) is None:
			ledger.progress.append(IntervalStat(interval=name))
	recompute_accuracies(ledger)
	return ledger


def record(ledger: ProgressLedger, interval: str, was_correct: bool, now: Optional[datetime] = None) -> None:
	tier_of(interval)  # unknown names are a programming error
	now = now or datetime.now()
	st_i = _stat(ledger, interval)
	if st_i is None:
		st_i = IntervalStat(interval=interval)
		ledger.progress.append(st_i)
	st_i.attempts += 1
	if was_correct:
		st_i.correct_attempts += 1
	st_i.last_practiced = now
	ledger.total_exercises_completed += 1
	ledger.last_session_date = now
	recompute_accuracies(ledger)


def attempts_of(ledger: ProgressLedger, tier: str) -> int:
	names = TIERS[tier]
	return sum(st_i.attempts for st_i in ledger.progress if st_i.interval in names)


def _correct_of(ledger: ProgressLedger, tier: str) -> int:
	names = TIERS[tier]
	return sum(st_i.correct_attempts for st_i in ledger.progress if st_i.interval in names)


def accuracy_of(ledger: ProgressLedger, tier: str) -> float:
	attempts = attempts_of(ledger, tier)
	if attempts == 0:
		return 0.0
	return _correct_of(ledger, tier) / float(attempts)


def recompute_accuracies(ledger: ProgressLedger) -> None:
	ledger.easy_accuracy = accuracy_of(ledger, "easy")
	ledger.medium_accuracy = accuracy_of(ledger, "medium")
	ledger.hard_accuracy = accuracy_of(ledger, "hard")


def overall_accuracy(ledger: ProgressLedger) -> float:
	attempts = sum(st_i.attempts for st_i in ledger.progress)
	if attempts == 0:
		return 0.0
	return sum(st_i.correct_attempts for st_i in ledger.progress) / float(attempts)


def interval_details(ledger: ProgressLedger) -> List[Dict[str, Any]]:
	"""One row per catalog interval for the progress table, in catalog order."""
	rows = []
	for name in interval_names():
		st_i = _stat(ledger, name) or IntervalStat(interval=name)
		acc = (st_i.correct_attempts / st_i.attempts) if st_i.attempts else 0.0
		rows.append({
			"interval": name,
			"tier": tier_of(name),
			"attempts": st_i.attempts,
			"correct": st_i.correct_attempts,
			"accuracy": round(acc, 3),
		})
	return rows
