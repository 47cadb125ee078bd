from vocalstream.playback import MixerPlayer, WallClockPlayer


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def test_position_before_play():
    player = WallClockPlayer(duration_s=5.0, clock=FakeClock())
    assert player.position() is None
    assert not player.ended()


def test_position_advances_and_pauses():
    clock = FakeClock()
    player = WallClockPlayer(duration_s=5.0, clock=clock)
    player.play()
    clock.now += 1.5
    assert player.position() == 1.5
    player.pause()
    clock.now += 10.0
    assert player.position() == 1.5
    player.resume()
    clock.now += 0.5
    assert player.position() == 2.0


def test_ends_after_duration_or_stop():
    clock = FakeClock()
    player = WallClockPlayer(duration_s=2.0, clock=clock)
    player.play()
    clock.now += 2.0
    assert player.ended()

    other = WallClockPlayer(duration_s=2.0, clock=clock)
    other.play()
    other.stop()
    assert other.ended()


class FakeMusic:
    def __init__(self):
        self.busy = True
        self.player = None
        self.ended_during_pause = None

    def play(self):
        self.busy = True

    def pause(self):
        self.busy = False
        self.ended_during_pause = self.player.ended()

    def unpause(self):
        self.busy = True

    def get_busy(self):
        return self.busy


def _mixer_player():
    player = MixerPlayer.__new__(MixerPlayer)
    player._music = FakeMusic()
    player._music.player = player
    player.audio_offset_s = 0.0
    player._started = False
    player._paused = False
    return player


def test_mixer_pause_is_not_mistaken_for_end():
    player = _mixer_player()
    player.play()
    player.pause()
    assert player._music.ended_during_pause is False
    assert not player.ended()
    player.resume()
    player._music.busy = False
    assert player.ended()
