from __future__ import annotations

import json
import logging
import os
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from .ledger import new_ledger
from .models import Settings, User

ENV_HOME = "INTERVALTUTOR_HOME"


def default_data_path() -> Path:
	home = os.environ.get(ENV_HOME)
	dir_ = Path(home) if home else Path.home() / ".intervaltutor"
	return dir_ / "data.json"


class UserStore:
	"""All profiles, the current profile id and settings, kept in a single JSON file."""

	def __init__(self, path: Optional[Path] = None) -> None:
		self.path = Path(path) if path is not None else default_data_path()

	def _load_raw(self) -> Dict[str, Any]:
		if not self.path.exists():
			return {}
		try:
			data = json.loads(self.path.read_text(encoding="utf-8"))
			return data if isinstance(data, dict) else {}
		except (OSError, ValueError) as e:
			logging.error(f"Could not read {self.path}: {e}")
			return {}

	def _save_raw(self, data: Dict[str, Any]) -> None:
		self.path.parent.mkdir(parents=True, exist_ok=True)
		self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

	def _users_raw(self, raw: Dict[str, Any]) -> Dict[str, Any]:
		users = raw.get("users")
		if not isinstance(users, dict):
			users = {}
			raw["users"] = users
		return users

	def load_user(self, user_id: str) -> Optional[User]:
		obj = self._users_raw(self._load_raw()).get(user_id)
		if not isinstance(obj, dict):
			return None
		try:
			return User.model_validate(obj)
		except ValidationError as e:
			logging.error(f"Stored profile {user_id} is invalid: {e}")
			return None

	def save_user(self, user: User) -> bool:
		user.last_active = datetime.now()
		try:
			raw = self._load_raw()
			self._users_raw(raw)[user.id] = user.model_dump(mode="json")
			self._save_raw(raw)
		except OSError as e:
			logging.error(f"Could not save profile {user.id}: {e}")
			return False
		return True

	def list_users(self) -> List[User]:
		users = []
		for user_id in self._users_raw(self._load_raw()):
			user = self.load_user(user_id)
			if user is not None:
				users.append(user)
		return users

	def create_user(self, name: str) -> Optional[User]:
		name = name.strip()
		if not name:
			return None
		user = User(id=uuid.uuid4().hex[:12], name=name, interval_training=new_ledger())
		self.save_user(user)
		return user

	def rename_user(self, user_id: str, name: str) -> Optional[User]:
		user = self.load_user(user_id)
		if user is None or not name.strip():
			return None
		user.name = name.strip()
		self.save_user(user)
		return user

	def delete_user(self, user_id: str) -> bool:
		raw = self._load_raw()
		users = self._users_raw(raw)
		if user_id not in users:
			return False
		del users[user_id]
		if raw.get("current_user") == user_id:
			raw["current_user"] = None
		try:
			self._save_raw(raw)
		except OSError as e:
			logging.error(f"Could not delete profile {user_id}: {e}")
			return False
		return True

	def get_current_user_id(self) -> Optional[str]:
		current = self._load_raw().get("current_user")
		return current if isinstance(current, str) else None

	def set_current_user_id(self, user_id: Optional[str]) -> bool:
		raw = self._load_raw()
		raw["current_user"] = user_id
		try:
			self._save_raw(raw)
		except OSError as e:
			logging.error(f"Could not remember current profile: {e}")
			return False
		return True

	def load_settings(self) -> Settings:
		obj = self._load_raw().get("settings", {})
		if isinstance(obj, dict):
			try:
				return Settings.model_validate(obj)
			except ValidationError as e:
				logging.warning(f"Ignoring invalid settings: {e}")
		return Settings()

	def save_settings(self, s: Settings) -> bool:
		raw = self._load_raw()
		raw["settings"] = s.model_dump()
		try:
			self._save_raw(raw)
		except OSError as e:
			logging.error(f"Error saving settings: {e}")
			return False
		return True
