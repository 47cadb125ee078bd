from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import pygame

from .ledger import FeedbackKind
from .scoring import ScoreSummary

FEEDBACK_COLORS = {
    FeedbackKind.MATCH: (120, 230, 140),
    FeedbackKind.MISS_HIGH: (255, 170, 90),
    FeedbackKind.MISS_LOW: (120, 170, 255),
    FeedbackKind.NO_INPUT: (150, 150, 150),
}

FEEDBACK_LABELS = {
    FeedbackKind.MATCH: "Afinado",
    FeedbackKind.MISS_HIGH: "Alto demais",
    FeedbackKind.MISS_LOW: "Baixo demais",
    FeedbackKind.NO_INPUT: "Sem voz",
}

KEY_ACTIONS = {
    pygame.K_SPACE: "pause",
    pygame.K_UP: "octave_up",
    pygame.K_DOWN: "octave_down",
    pygame.K_RIGHT: "latency_up",
    pygame.K_LEFT: "latency_down",
}


@dataclass
class UIState:
    title: str
    artist: Optional[str]
    paused: bool
    sung_name: Optional[str]
    sung_hz: Optional[float]
    target_name: Optional[str]
    feedback: Optional[FeedbackKind]
    notes_matched: int
    notes_scored: int
    notes_total: int
    octave_offset: int
    latency_ms: float


class PygameUI:
    def __init__(self, fullscreen: bool = False, size: tuple[int, int] | None = None):
        pygame.init()
        flags = pygame.FULLSCREEN if fullscreen else 0
        if size is None:
            self.screen = pygame.display.set_mode((0, 0), flags)
        else:
            self.screen = pygame.display.set_mode(size, flags)
        pygame.display.set_caption("Vocal Stream")

        self.clock = pygame.time.Clock()
        self.width, self.height = self.screen.get_size()
        self.font_title = pygame.font.SysFont("DejaVu Sans", 48, bold=True)
        self.font_note = pygame.font.SysFont("DejaVu Sans", 96, bold=True)
        self.font_feedback = pygame.font.SysFont("DejaVu Sans", 40, bold=True)
        self.font_meta = pygame.font.SysFont("DejaVu Sans", 28)
        self.actions: List[str] = []

    def update(self, state: UIState) -> bool:
        if not self._handle_events():
            return False

        self._draw_background()
        self._draw_header(state)
        self._draw_pitch(state)
        self._draw_status(state)

        pygame.display.flip()
        self.clock.tick(30)
        return True

    def show_summary(self, title: str, summary: ScoreSummary) -> bool:
        if not self._handle_events():
            return False

        self._draw_background()
        header = self.font_title.render(title, True, (240, 240, 240))
        self.screen.blit(header, (40, 24))

        grade = self.font_note.render(summary.grade.value, True, (255, 236, 156))
        self.screen.blit(grade, grade.get_rect(center=(self.width // 2, self.height // 2 - 40)))

        lines = [
            f"{summary.percentage}% afinado ({summary.matched}/{summary.total} notas)",
            f"Alto: {summary.miss_high}  |  Baixo: {summary.miss_low}  |  Sem voz: {summary.no_input}",
        ]
        for idx, text in enumerate(lines):
            surf = self.font_meta.render(text, True, (190, 190, 190))
            self.screen.blit(surf, surf.get_rect(center=(self.width // 2, self.height // 2 + 60 + idx * 40)))

        pygame.display.flip()
        self.clock.tick(30)
        return True

    def take_actions(self) -> List[str]:
        actions, self.actions = self.actions, []
        return actions

    def _handle_events(self) -> bool:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type == pygame.KEYDOWN:
                if event.key in (pygame.K_ESCAPE, pygame.K_q):
                    return False
                action = KEY_ACTIONS.get(event.key)
                if action:
                    self.actions.append(action)
        return True

    def _draw_background(self) -> None:
        self.screen.fill((10, 12, 18))
        top = pygame.Color(18, 30, 54)
        bottom = pygame.Color(6, 8, 14)
        for y in range(self.height):
            ratio = y / max(self.height - 1, 1)
            r = int(top.r * (1 - ratio) + bottom.r * ratio)
            g = int(top.g * (1 - ratio) + bottom.g * ratio)
            b = int(top.b * (1 - ratio) + bottom.b * ratio)
            pygame.draw.line(self.screen, (r, g, b), (0, y), (self.width, y))

    def _draw_header(self, state: UIState) -> None:
        title = state.title
        if state.artist:
            title = f"{state.title} - {state.artist}"
        if state.paused:
            title = f"{title}  (pausado)"
        text = self.font_title.render(title, True, (240, 240, 240))
        self.screen.blit(text, (40, 24))

    def _draw_pitch(self, state: UIState) -> None:
        color = FEEDBACK_COLORS.get(state.feedback, (200, 200, 200))
        sung = state.sung_name or "--"
        sung_surf = self.font_note.render(sung, True, color)
        self.screen.blit(sung_surf, sung_surf.get_rect(center=(self.width // 2, self.height // 2 - 40)))

        hz_text = f"{state.sung_hz:6.1f} Hz" if state.sung_hz is not None else ""
        target_text = f"Alvo: {state.target_name}" if state.target_name else "Sem nota alvo"
        if state.feedback is not None:
            target_text = f"{target_text}  -  {FEEDBACK_LABELS[state.feedback]}"

        hz_surf = self.font_meta.render(hz_text, True, (190, 190, 190))
        target_surf = self.font_feedback.render(target_text, True, color)
        self.screen.blit(hz_surf, hz_surf.get_rect(center=(self.width // 2, self.height // 2 + 30)))
        self.screen.blit(target_surf, target_surf.get_rect(center=(self.width // 2, self.height // 2 + 90)))

    def _draw_status(self, state: UIState) -> None:
        score_text = f"Notas afinadas: {state.notes_matched}/{state.notes_scored}  |  Total: {state.notes_total}"
        meta_text = f"Oitava: {state.octave_offset:+d}  |  Latencia: {state.latency_ms:.0f} ms"

        score_surf = self.font_meta.render(score_text, True, (180, 220, 255))
        meta_surf = self.font_meta.render(meta_text, True, (150, 150, 150))

        self.screen.blit(score_surf, (40, self.height - 80))
        self.screen.blit(meta_surf, (40, self.height - 45))

    def close(self) -> None:
        pygame.quit()
