from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import pygame

from workshop.scoring import format_signed, verdict
from workshop.state_machine import ActionState, PredictionState, ResultsState, SetupState
from workshop.tasks.base import TaskVariant
from workshop.tasks.month_sort import FIELD_COUNT, FIELD_LABEL


@dataclass(frozen=True)
class UiTheme:
    bg: Tuple[int, int, int] = (15, 23, 42)
    panel: Tuple[int, int, int] = (30, 41, 59)
    border: Tuple[int, int, int] = (51, 65, 85)
    text: Tuple[int, int, int] = (226, 232, 240)
    muted: Tuple[int, int, int] = (148, 163, 184)
    accent: Tuple[int, int, int] = (139, 92, 246)
    good: Tuple[int, int, int] = (16, 185, 129)
    perfect: Tuple[int, int, int] = (245, 158, 11)
    alert: Tuple[int, int, int] = (239, 68, 68)
    locked: Tuple[int, int, int] = (22, 30, 46)


class WorkshopUI:
    def __init__(self, screen: pygame.Surface) -> None:
        self.screen = screen
        self.w, self.h = screen.get_size()
        self.theme = UiTheme()
        self.ui_scale = max(0.75, min(1.15, min(self.w / 1280.0, self.h / 720.0)))
        self.font_big = self._make_font(max(30, int(40 * self.ui_scale)), bold=True)
        self.font_huge = self._make_font(max(48, int(64 * self.ui_scale)), bold=True)
        self.font_mid = self._make_font(max(22, int(26 * self.ui_scale)))
        self.font_small = self._make_font(max(16, int(20 * self.ui_scale)))
        self.font_tiny = self._make_font(max(14, int(16 * self.ui_scale)))

        margin = max(12, min(24, self.w // 60))
        top = max(70, min(90, self.h // 9))
        self.main_panel = pygame.Rect(margin, top, self.w - margin * 2, self.h - top - margin)

        # прямоугольники кнопок/полей пересчитываются при каждом рендере
        self.button_rects: Dict[str, pygame.Rect] = {}
        self.variant_rects: List[pygame.Rect] = []
        self.field_rects: Dict[Tuple[int, str], pygame.Rect] = {}

    def clear(self) -> None:
        self.screen.fill(self.theme.bg)
        self.button_rects = {}
        self.variant_rects = []
        self.field_rects = {}

    def draw_frame(self) -> None:
        pygame.draw.rect(self.screen, self.theme.panel, self.main_panel, border_radius=10)
        pygame.draw.rect(self.screen, self.theme.border, self.main_panel, width=2, border_radius=10)

    def draw_title(self, text: str) -> None:
        main = self.font_big.render(text, True, self.theme.text)
        rect = main.get_rect(center=(self.w // 2, self.main_panel.y // 2))
        self.screen.blit(main, rect)

    def draw_admin_button(self) -> None:
        height = max(32, min(44, self.main_panel.y - 24))
        rect = pygame.Rect(self.main_panel.right - 196, (self.main_panel.y - height) // 2, 196, height)
        self.draw_button("admin", rect, "Admin dashboard")

    def draw_button(self, name: str, rect: pygame.Rect, label: str, active: bool = False) -> None:
        fill = (51, 65, 85) if not active else (76, 29, 149)
        border = self.theme.accent if active else self.theme.border
        pygame.draw.rect(self.screen, fill, rect, border_radius=10)
        pygame.draw.rect(self.screen, border, rect, width=2, border_radius=10)
        self._draw_fitted_text(text=label, rect=rect, color=self.theme.text, align="center")
        self.button_rects[name] = rect

    def draw_lines(self, lines: List[str], x: int, y: int, color=None, step: int = 28) -> int:
        color = color or self.theme.text
        for line in lines:
            surf = self.font_small.render(line, True, color)
            self.screen.blit(surf, (x, y))
            y += step
        return y

    # --------------------------
    # setup
    # --------------------------
    def draw_setup(self, state: SetupState, variants: List[TaskVariant]) -> None:
        x = self.main_panel.x + 32
        y = self.main_panel.y + 24
        header = self.font_mid.render("The Planning Fallacy", True, self.theme.accent)
        self.screen.blit(header, (x, y))
        y = self.draw_lines(
            [
                "People tend to underestimate how long tasks take them.",
                "You will make a prediction, then do the task while the clock runs.",
            ],
            x,
            y + 44,
            color=self.theme.muted,
        )

        if len(variants) > 1:
            y += 12
            for index, variant in enumerate(variants):
                rect = pygame.Rect(x, y, 420, 44)
                label = f"[{index + 1}] {variant.title} ({variant.unit})"
                self.draw_button(f"variant_{index}", rect, label, active=index == state.variant_index)
                self.variant_rects.append(rect)
                y += 56
        variant = variants[state.variant_index]
        y = self.draw_lines(variant.instructions(), x, y + 16)

        self.draw_button("continue", pygame.Rect(x, y + 20, 220, 48), "Continue [Enter]", active=True)

    # --------------------------
    # prediction
    # --------------------------
    def draw_prediction(self, state: PredictionState) -> None:
        x = self.main_panel.x + 32
        y = self.main_panel.y + 24
        header = self.font_mid.render("Make your prediction", True, self.theme.accent)
        self.screen.blit(header, (x, y))
        y = self.draw_lines(state.variant.instructions(), x, y + 44, color=self.theme.muted)

        field = pygame.Rect(x, y + 16, 260, 52)
        pygame.draw.rect(self.screen, self.theme.locked, field, border_radius=8)
        pygame.draw.rect(self.screen, self.theme.accent, field, width=2, border_radius=8)
        value = self.font_mid.render(state.text or " ", True, self.theme.text)
        self.screen.blit(value, value.get_rect(midleft=(field.x + 12, field.centery)))
        unit = self.font_small.render(state.variant.unit, True, self.theme.muted)
        self.screen.blit(unit, unit.get_rect(midleft=(field.right + 12, field.centery)))

        if state.error:
            err = self.font_small.render(state.error, True, self.theme.alert)
            self.screen.blit(err, (x, field.bottom + 10))

        buttons_y = field.bottom + 52
        self.draw_button("back", pygame.Rect(x, buttons_y, 160, 48), "Back [Esc]")
        self.draw_button("lock", pygame.Rect(x + 180, buttons_y, 260, 48), "Lock in [Enter]", active=True)

    # --------------------------
    # action
    # --------------------------
    def draw_action(self, state: ActionState) -> None:
        panel = self.main_panel
        x = panel.x + 32
        y = panel.y + 20

        info = f"Your prediction: {state.estimate:g} {state.variant.unit}"
        self.screen.blit(self.font_small.render(info, True, self.theme.muted), (x, y))
        clock_value = state.remaining if state.remaining is not None else state.elapsed
        clock = self.font_huge.render(f"{clock_value:.1f}s", True, self.theme.text)
        self.screen.blit(clock, (panel.right - clock.get_width() - 32, y))

        if not state.running:
            self.draw_button("start", pygame.Rect(x, y + 40, 200, 48), "Start [Space]", active=True)
        else:
            self.draw_button("stop", pygame.Rect(x, y + 40, 200, 48), "Stop [Esc]")

        self._draw_month_table(state, x, y + 104)
        if state.confirming_stop:
            self.draw_confirm_modal()

    def _draw_month_table(self, state: ActionState, x: int, y: int) -> None:
        task = state.task
        row_h = max(26, min(38, (self.main_panel.bottom - y - 16) // max(1, len(task.rows))))
        for index in range(len(task.rows)):
            row_y = y + index * row_h
            enterable = task.is_enterable(index) and state.running
            for field, width, offset in ((FIELD_LABEL, 220, 40), (FIELD_COUNT, 70, 272)):
                rect = pygame.Rect(x + offset, row_y, width, row_h - 6)
                focused = enterable and state.focus_row == index and state.focus_field == field
                fill = self.theme.panel if enterable else self.theme.locked
                border = self.theme.accent if focused else self.theme.border
                pygame.draw.rect(self.screen, fill, rect, border_radius=6)
                pygame.draw.rect(self.screen, border, rect, width=2, border_radius=6)
                text = task.field_text(index, field)
                if text:
                    surf = self.font_tiny.render(text, True, self.theme.text)
                    self.screen.blit(surf, surf.get_rect(midleft=(rect.x + 8, rect.centery)))
                self.field_rects[(index, field)] = rect
            number = self.font_tiny.render(f"{index + 1}.", True, self.theme.muted)
            self.screen.blit(number, (x, row_y + 4))
            if task.row_matches(index):
                ok = self.font_tiny.render("OK", True, self.theme.good)
                self.screen.blit(ok, (x + 356, row_y + 4))

    def draw_confirm_modal(self) -> None:
        overlay = pygame.Surface((self.w, self.h), pygame.SRCALPHA)
        overlay.fill((6, 8, 14, 190))
        self.screen.blit(overlay, (0, 0))
        box = pygame.Rect(0, 0, 520, 200)
        box.center = (self.w // 2, self.h // 2)
        pygame.draw.rect(self.screen, self.theme.panel, box, border_radius=12)
        pygame.draw.rect(self.screen, self.theme.border, box, width=2, border_radius=12)
        title = self.font_mid.render("Stop the timer?", True, self.theme.text)
        self.screen.blit(title, (box.x + 24, box.y + 20))
        hint = self.font_small.render("Your time will be final.", True, self.theme.muted)
        self.screen.blit(hint, (box.x + 24, box.y + 60))
        self.draw_button("cancel_stop", pygame.Rect(box.x + 24, box.bottom - 72, 200, 48), "Keep going [N]")
        self.draw_button(
            "confirm_stop",
            pygame.Rect(box.right - 224, box.bottom - 72, 200, 48),
            "Stop [Y]",
            active=True,
        )

    # --------------------------
    # results
    # --------------------------
    def draw_results(self, state: ResultsState, save_status: str) -> None:
        x = self.main_panel.x + 32
        y = self.main_panel.y + 24
        score = state.score
        unit = state.variant.unit
        header = self.font_mid.render("Your results", True, self.theme.accent)
        self.screen.blit(header, (x, y))

        label = verdict(score)
        color = self.theme.perfect if score.is_perfect else (
            self.theme.good if score.error > 0 else self.theme.alert
        )
        big = self.font_huge.render(label, True, color)
        self.screen.blit(big, (x, y + 44))

        lines = [
            f"Predicted: {score.predicted:g} {unit}",
            f"Actual: {score.actual:g} {unit}",
            f"Difference: {format_signed(score.error)} {unit}",
            f"Off by: {score.error_percent_text}%",
            f"Ratio (actual / predicted): {score.error_ratio_text}",
            f"Time on the clock: {state.elapsed:.1f}s",
        ]
        y = self.draw_lines(lines, x, y + 140)
        if save_status:
            self.screen.blit(self.font_tiny.render(save_status, True, self.theme.muted), (x, y + 8))
        self.draw_button("reset", pygame.Rect(x, y + 48, 220, 48), "Try again [R]", active=True)

    def hit_button(self, pos: Tuple[int, int]) -> Optional[str]:
        for name, rect in self.button_rects.items():
            if rect.collidepoint(pos):
                return name
        return None

    def hit_field(self, pos: Tuple[int, int]) -> Optional[Tuple[int, str]]:
        for key, rect in self.field_rects.items():
            if rect.collidepoint(pos):
                return key
        return None

    def _draw_fitted_text(
        self,
        text: str,
        rect: pygame.Rect,
        color: Tuple[int, int, int],
        align: str = "center",
    ) -> None:
        fonts = [self.font_small, self.font_tiny]
        surf = None
        for font in fonts:
            if font.size(text)[0] <= rect.width - 12:
                surf = font.render(text, True, color)
                break
        if surf is None:
            fallback_size = max(12, int(self.font_tiny.get_height() * 0.85))
            fallback = self._make_font(fallback_size)
            clipped = text
            while len(clipped) > 3 and fallback.size(clipped + "...")[0] > rect.width - 12:
                clipped = clipped[:-1]
            surf = fallback.render((clipped + "...") if clipped != text else text, True, color)
        if align == "left":
            text_rect = surf.get_rect(midleft=(rect.x + 6, rect.centery))
        else:
            text_rect = surf.get_rect(center=rect.center)
        self.screen.blit(surf, text_rect)

    def _make_font(self, size: int, bold: bool = False) -> pygame.font.Font:
        candidates = [
            "sfprotext",
            "helveticaneue",
            "segoeui",
            "arial",
        ]
        for name in candidates:
            path = pygame.font.match_font(name)
            if path:
                font = pygame.font.Font(path, size)
                if bold:
                    font.set_bold(True)
                return font
        return pygame.font.SysFont(None, size, bold=bold)
