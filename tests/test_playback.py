from intervaltutor.models import Settings
from intervaltutor.playback import BASE_STEP_DURATION, Player


class FakeClock:
	def __init__(self) -> None:
		self.now = 100.0

	def __call__(self) -> float:
		return self.now


def make_player():
	played = []
	clock = FakeClock()
	player = Player(played.append, Settings(note_duration=1.0, step_duration=0.6), clock=clock)
	return player, played, clock


def test_play_hands_wav_to_sink():
	player, played, _ = make_player()
	assert player.play(440.0)
	assert len(played) == 1
	assert played[0][:4] == b"RIFF"


def test_overlapping_requests_are_dropped():
	player, played, clock = make_player()
	assert player.play(440.0)
	clock.now += 0.5
	assert player.is_playing
	assert not player.play(660.0)
	clock.now += 0.6
	assert not player.is_playing
	assert player.play(660.0)
	assert len(played) == 2


def test_steps_block_for_whole_walk():
	player, played, clock = make_player()
	assert player.play_steps(261.63, 329.63, 4)
	clock.now += BASE_STEP_DURATION + 3 * 0.6 - 0.1
	assert player.is_playing
	clock.now += 1.0
	assert not player.is_playing
	assert len(played) == 1


def test_sink_failure_does_not_raise():
	def broken(data: bytes) -> None:
		raise RuntimeError("no audio device")

	player = Player(broken, clock=FakeClock())
	assert player.play(440.0)
