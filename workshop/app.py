import logging
import threading
import webbrowser
from typing import Optional

import pygame

from config.settings import ServiceDefaults, WindowConfig, WorkshopConfig
from data.attempt_client import AttemptClient
from workshop.input_handlers import handle_key_event, handle_mouse
from workshop.runtime.identity import resolve_user_id
from workshop.runtime.models import AttemptRecord
from workshop.runtime.paths import app_data_path
from workshop.runtime.service_settings import load_service_settings
from workshop.state_machine import PHASE_ACTION, PHASE_PREDICTION, PHASE_RESULTS, WorkshopStateMachine
from workshop.tasks import build_variant
from workshop.ticker import TICK_EVENT, PygameTicker
from workshop.ui import WorkshopUI

logger = logging.getLogger(__name__)


class WorkshopApp:
    def __init__(self, window: WindowConfig, workshop: WorkshopConfig) -> None:
        pygame.init()
        self.screen = pygame.display.set_mode((window.width, window.height))
        pygame.display.set_caption(window.title)
        self.clock = pygame.time.Clock()
        self.ui = WorkshopUI(self.screen)
        self.window = window
        self.workshop = workshop

        defaults = ServiceDefaults()
        self.services = load_service_settings(app_data_path(workshop.settings_file), defaults)
        self.client = AttemptClient(
            api_url=self.services.api_url,
            api_key=self.services.api_key,
            timeout_sec=defaults.timeout_sec,
        )
        variants = [build_variant(t, workshop.countdown_limit_sec) for t in workshop.offered_variants]
        self.machine = WorkshopStateMachine(
            variants=variants,
            ticker=PygameTicker(interval_ms=workshop.tick_ms),
            attempt_sink=self._save_attempt,
            user_id=resolve_user_id(self.client),
        )
        logger.info("Workshop started for user_id=%s", self.machine.user_id)
        self._save_thread: Optional[threading.Thread] = None
        self.running = True

    def run(self) -> None:
        while self.running:
            self.clock.tick(self.window.fps)

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                elif event.type == TICK_EVENT:
                    self.machine.tick()
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    handle_mouse(self, event.pos)
                elif event.type == pygame.KEYDOWN:
                    handle_key_event(self, event)

            self._render()

        self.machine.shutdown()
        self.client.wait()
        pygame.quit()

    def open_dashboard(self) -> None:
        logger.info("Opening dashboard at %s", self.services.dashboard_url)
        webbrowser.open(self.services.dashboard_url)

    def _save_attempt(self, record: AttemptRecord) -> None:
        self._save_thread = self.client.submit(record)

    def _render(self) -> None:
        self.ui.clear()
        self.ui.draw_title("Planning Fallacy Workshop")
        self.ui.draw_frame()
        self.ui.draw_admin_button()

        state = self.machine.state
        phase = self.machine.phase
        if phase == PHASE_PREDICTION:
            self.ui.draw_prediction(state)
        elif phase == PHASE_ACTION:
            self.ui.draw_action(state)
        elif phase == PHASE_RESULTS:
            self.ui.draw_results(state, save_status_text(self._save_thread, self.client.last_error))
        else:
            self.ui.draw_setup(state, self.machine.variants)

        pygame.display.flip()


def save_status_text(thread: Optional[threading.Thread], last_error: str) -> str:
    if thread is None:
        return "Result not saved: backend is not configured"
    if thread.is_alive():
        return "Saving your result..."
    if last_error:
        return "Could not save your result"
    return "Result saved"
