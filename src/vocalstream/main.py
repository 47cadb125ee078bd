from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import Optional, Union

from .capture import MicrophoneCapture
from .config import AudioConfig, Calibration, SessionConfig
from .errors import ConfigurationOutOfRange, InvalidScript
from .ledger import FeedbackKind
from .playback import MixerPlayer, WallClockPlayer
from .scoring import ScoreSummary
from .session import MediaPlayer, Session, SessionSnapshot, SessionState
from .song import Song
from .ui import PygameUI, UIState

logger = logging.getLogger(__name__)

LATENCY_STEP_MS = 25.0
HEADLESS_TAIL_S = 1.0


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Vocal Stream: afinacao em tempo real")
    parser.add_argument("--song", required=True, help="Pasta da musica (melody.csv, audio, meta.json)")
    parser.add_argument("--fullscreen", action="store_true", help="Tela cheia")
    parser.add_argument("--headless", action="store_true", help="Sem UI/sem playback")
    parser.add_argument("--device", help="Dispositivo de entrada de audio (indice ou nome)")
    parser.add_argument("--samplerate", type=int, default=44100, help="Sample rate")
    parser.add_argument("--blocksize", type=int, default=2048, help="Tamanho do bloco de audio")
    parser.add_argument("--octave-offset", type=int, default=-1, help="Deslocamento de oitava das notas alvo")
    parser.add_argument("--latency-ms", type=float, default=300.0, help="Compensacao de latencia (ms)")
    parser.add_argument("--tolerance-cents", type=float, default=50.0, help="Tolerancia de afinacao (cents)")
    parser.add_argument("--log-level", default="WARNING", help="Nivel de log (DEBUG, INFO, ...)")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        song = Song.from_dir(Path(args.song))
        calibration = Calibration(
            octave_offset=args.octave_offset,
            latency_ms=args.latency_ms,
            tolerance_cents=args.tolerance_cents,
        )
        calibration.validate()
    except (FileNotFoundError, InvalidScript, ConfigurationOutOfRange) as exc:
        print(f"Erro: {exc}")
        return 2

    if not args.headless and song.audio_path is None:
        print("Erro: nao achei audio.wav/audio.ogg/audio.mp3 (use --headless)")
        return 2

    audio_cfg = AudioConfig(sample_rate=args.samplerate, block_size=args.blocksize)
    session = Session(audio_cfg, SessionConfig(), calibration)
    session.load(song.melody.notes)

    ui: Optional[PygameUI] = None
    player: MediaPlayer
    if args.headless:
        player = WallClockPlayer(duration_s=song.duration_s + HEADLESS_TAIL_S)
    else:
        ui = PygameUI(fullscreen=args.fullscreen)
        player = MixerPlayer(song.audio_path, audio_cfg.sample_rate, song.audio_offset_s)

    with MicrophoneCapture(audio_cfg, device=_parse_device(args.device)) as capture:
        session.start(capture, player)
        running = True
        try:
            while running and session.state is not SessionState.FINISHED:
                if ui:
                    running = ui.update(_build_ui_state(song, session.snapshot()))
                    for action in ui.take_actions():
                        _apply_action(session, action)
                else:
                    time.sleep(0.05)
        except KeyboardInterrupt:
            pass

        summary = session.finish()

    _print_final(summary)
    if ui:
        while ui.show_summary(song.title, summary):
            pass
        ui.close()
    return 0


def _parse_device(raw: Optional[str]) -> Optional[Union[int, str]]:
    if raw is None:
        return None
    return int(raw) if raw.isdigit() else raw


def _apply_action(session: Session, action: str) -> None:
    calibration = session.calibration
    try:
        if action == "pause":
            session.toggle_pause()
        elif action == "octave_up":
            session.set_octave_offset(calibration.octave_offset + 1)
        elif action == "octave_down":
            session.set_octave_offset(calibration.octave_offset - 1)
        elif action == "latency_up":
            session.set_latency_ms(calibration.latency_ms + LATENCY_STEP_MS)
        elif action == "latency_down":
            session.set_latency_ms(calibration.latency_ms - LATENCY_STEP_MS)
    except ConfigurationOutOfRange as exc:
        logger.warning("Ajuste ignorado: %s", exc)


def _build_ui_state(song: Song, snapshot: SessionSnapshot) -> UIState:
    tick = snapshot.tick
    matched = sum(1 for record in snapshot.permanent.values() if record.result is FeedbackKind.MATCH)
    return UIState(
        title=song.title,
        artist=song.artist,
        paused=snapshot.state is SessionState.PAUSED,
        sung_name=tick.note_name if tick else None,
        sung_hz=tick.smoothed_hz if tick else None,
        target_name=tick.target_name if tick else None,
        feedback=tick.feedback if tick else None,
        notes_matched=matched,
        notes_scored=len(snapshot.permanent),
        notes_total=len(song.melody),
        octave_offset=snapshot.calibration.octave_offset,
        latency_ms=snapshot.calibration.latency_ms,
    )


def _print_final(summary: ScoreSummary) -> None:
    print("")
    print("Resultado final:")
    print(f"  Nota:         {summary.grade.value}")
    print(f"  Afinacao:     {summary.percentage:3d}%")
    print(f"  Notas:        {summary.matched}/{summary.total}")
    print(f"  Alto demais:  {summary.miss_high}")
    print(f"  Baixo demais: {summary.miss_low}")
    print(f"  Sem voz:      {summary.no_input}")


if __name__ == "__main__":
    raise SystemExit(main())
