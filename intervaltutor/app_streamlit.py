import logging
import os
from typing import Any

import altair as alt
import pandas as pd
import streamlit as st

from intervaltutor.ledger import interval_details, overall_accuracy
from intervaltutor.models import Note, Settings, Waveform
from intervaltutor.playback import Player
from intervaltutor.proficiency import (
	LEVELS,
	MIN_ATTEMPTS,
	PROFICIENCY_THRESHOLD,
	level_display_name,
	mastery_text,
	next_unlockable_level,
	tier_summary,
	unlock_requirements,
)
from intervaltutor.session import HINT_STEPS, TrainingSession
from intervaltutor.storage import UserStore
from intervaltutor.theory import STAFF_NOTES, staff_to_note


st.set_page_config(page_title="Interval Tutor", page_icon=None, layout="centered")

logging.basicConfig(
	level=getattr(logging, os.environ.get("INTERVALTUTOR_LOG_LEVEL", "INFO").upper(), logging.INFO),
	format="%(asctime)s - %(levelname)s - [%(module)s:%(lineno)d] - %(message)s",
)


def get_state() -> Any:
	if "store" not in st.session_state:
		st.session_state.store = UserStore()
	if "settings" not in st.session_state:
		st.session_state.settings = st.session_state.store.load_settings()
	if "audio" not in st.session_state:
		st.session_state.audio = None
	if "session" not in st.session_state:
		def sink(data: bytes) -> None:
			st.session_state.audio = data
		player = Player(sink, st.session_state.settings)
		st.session_state.session = TrainingSession(st.session_state.store, player, st.session_state.settings)
		current = st.session_state.store.get_current_user_id()
		if current:
			st.session_state.session.load_user(current)
	return st.session_state


def sidebar_profiles(state: Any) -> None:
	store: UserStore = state.store
	session: TrainingSession = state.session
	st.sidebar.header("Profile")
	users = store.list_users()
	if users:
		ids = [u.id for u in users]
		names = {u.id: u.name for u in users}
		current = session.user.id if session.user else None
		idx = ids.index(current) if current in ids else 0
		chosen = st.sidebar.selectbox("Current profile", ids, index=idx, format_func=lambda i: names[i])
		if chosen != current:
			store.set_current_user_id(chosen)
			session.load_user(chosen)
		if st.sidebar.button("Delete profile") and session.user is not None:
			store.delete_user(session.user.id)
			del state.session
			st.rerun()
		rename = st.sidebar.text_input("Rename profile", key="rename-profile")
		if st.sidebar.button("Rename") and session.user is not None and rename.strip():
			user = store.rename_user(session.user.id, rename)
			if user is not None:
				session.user.name = user.name
				st.rerun()
	new_name = st.sidebar.text_input("New profile name")
	if st.sidebar.button("Create profile") and new_name.strip():
		user = store.create_user(new_name)
		if user is not None:
			store.set_current_user_id(user.id)
			session.load_user(user.id)
			st.rerun()


def sidebar_settings(s: Settings, store: UserStore) -> Settings:
	st.sidebar.header("Sound")
	waveforms = ["sine", "triangle", "saw"]
	waveform_str = st.sidebar.selectbox("Waveform", waveforms, index=waveforms.index(s.waveform))
	volume = st.sidebar.slider("Volume", min_value=0.0, max_value=1.0, value=s.volume, step=0.05)
	waveform: Waveform = waveform_str  # type: ignore[assignment]
	new_s = s.model_copy(update={"waveform": waveform, "volume": volume})
	if new_s != s:
		store.save_settings(new_s)
	return new_s


def level_picker(session: TrainingSession) -> None:
	if session.user is None or session.state is None:
		return
	ledger = session.user.interval_training
	st.write(
		f"Proficiency: **{level_display_name(ledger.proficiency_level)}**"
		f" (highest achieved: {level_display_name(ledger.highest_achieved_level)})"
	)
	cols = st.columns(len(LEVELS))
	for col, level in zip(cols, LEVELS):
		with col:
			unlocked = session.state.is_unlocked(level)
			label = level_display_name(level) + (" ✓" if level == session.selected_level else "")
			if st.button(label, key=f"level-{level}", disabled=not unlocked, use_container_width=True):
				session.change_level(level)
				st.rerun()
	nxt = next_unlockable_level(ledger)
	if nxt is not None:
		st.caption(f"Next: {level_display_name(nxt)}. {unlock_requirements(ledger, nxt)}")


def notices(session: TrainingSession) -> None:
	if session.level_adjusted is not None:
		st.warning(session.level_adjusted.message)
		if st.button("OK", key="adjusted-ok"):
			session.dismiss_adjustment()
			st.rerun()
	if session.level_unlocked is not None:
		st.success(session.level_unlocked.message)
		if st.button("Switch level", key="unlock-ok"):
			session.acknowledge_unlock()
			st.rerun()


def note_picker() -> Note:
	names = [e.name for e in STAFF_NOTES]
	name = st.selectbox("Your note", names, index=names.index("C5"))
	accidental = st.radio("Accidental", ["natural", "sharp", "flat"], horizontal=True)
	entry = STAFF_NOTES[names.index(name)]
	return staff_to_note(entry, accidental)  # type: ignore[arg-type]


def hint_panel(session: TrainingSession) -> None:
	if session.hint_level is None:
		return
	with st.container(border=True):
		st.markdown(f"**Hint - Level {session.hint_level}/{HINT_STEPS}**")
		for line in session.hint_lines():
			st.write(line)
		if session.hint_level == 1 and st.button("Play notes step by step"):
			session.play_steps()
		if session.hint_level == HINT_STEPS and st.button("Play interval note", key="hint-target"):
			session.play_target()
		p, n, c = st.columns(3)
		with p:
			if st.button("Previous", disabled=session.hint_level == 1, use_container_width=True):
				session.previous_hint()
				st.rerun()
		with n:
			if st.button("Next", disabled=session.hint_level == HINT_STEPS, use_container_width=True):
				session.next_hint()
				st.rerun()
		with c:
			if st.button("Close hint", use_container_width=True):
				session.close_hint()
				st.rerun()


def exercise_panel(session: TrainingSession) -> None:
	ex = session.exercise
	if ex is None:
		st.info("No exercise ready.")
		if st.button("New exercise"):
			session.new_exercise()
			st.rerun()
		return
	st.subheader(f"Base note: {ex.base_note.label()}")
	c1, c2, c3 = st.columns(3)
	with c1:
		if st.button("Play base note", use_container_width=True):
			session.play_base()
	with c2:
		if st.button("Play interval note", use_container_width=True):
			session.play_target()
	with c3:
		if st.button("Hint", use_container_width=True):
			session.show_hint()
	hint_panel(session)

	if session.feedback is not None:
		if session.feedback.correct:
			st.success(session.feedback.message)
		else:
			st.error(session.feedback.message)
		if st.button("Continue"):
			session.close_feedback()
			st.rerun()
		return

	chosen = note_picker()
	s1, s2, s3 = st.columns(3)
	with s1:
		if st.button("Submit", use_container_width=True):
			session.select_note(chosen)
			session.submit_answer()
			st.rerun()
	with s2:
		if st.button("Give up", use_container_width=True):
			session.give_up()
			st.rerun()
	with s3:
		if st.button("Clear", use_container_width=True):
			session.clear_selection()
			st.rerun()


def progress_panel(session: TrainingSession) -> None:
	if session.user is None:
		return
	ledger = session.user.interval_training
	st.markdown("---")
	st.subheader("Progress")
	st.write(
		f"Exercises: {ledger.total_exercises_completed} | Overall accuracy: {round(overall_accuracy(ledger) * 100)}%"
		f" | Last session: {ledger.last_session_date:%b %d, %Y}"
	)
	st.caption(f"Current level: {level_display_name(ledger.proficiency_level)}. {round(PROFICIENCY_THRESHOLD * 100)}% accuracy with at least {MIN_ATTEMPTS} attempts needed to advance")
	tiers = pd.DataFrame(tier_summary(ledger))
	st.dataframe(tiers, hide_index=True, column_config={
		"accuracy": st.column_config.ProgressColumn("accuracy", min_value=0.0, max_value=1.0, format="%.2f"),
	})
	st.write(f"**Mastery:** {mastery_text(ledger)}")
	df = pd.DataFrame(interval_details(ledger))
	st.dataframe(df, hide_index=True)
	if df["attempts"].sum() > 0:
		chart = alt.Chart(df).mark_bar().encode(
			x=alt.X("interval:N", sort=None),
			y=alt.Y("accuracy:Q", scale=alt.Scale(domain=[0, 1])),
			color=alt.Color("tier:N", sort=["easy", "medium", "hard"]),
			tooltip=["interval", "tier", "attempts", "correct", "accuracy"],
		).properties(width=500, height=300)
		st.altair_chart(chart, use_container_width=True)


def main() -> None:
	state = get_state()
	state.settings = sidebar_settings(state.settings, state.store)
	session: TrainingSession = state.session
	session.settings = state.settings
	if session.player is not None:
		session.player.settings = state.settings
	sidebar_profiles(state)

	st.title("Interval Tutor")
	if session.user is None:
		st.error("Please create or select a profile before starting training")
		return

	notices(session)
	level_picker(session)
	exercise_panel(session)

	if state.audio is not None:
		st.audio(state.audio, format="audio/wav", autoplay=True)
		state.audio = None

	progress_panel(session)


if __name__ == "__main__":
	main()
