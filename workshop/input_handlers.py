from __future__ import annotations

import pygame

from workshop.state_machine import (
    PHASE_ACTION,
    PHASE_PREDICTION,
    PHASE_RESULTS,
    PHASE_SETUP,
)
from workshop.tasks.input_utils import read_text_char

DIGIT_KEYS = {
    pygame.K_1: 0,
    pygame.K_2: 1,
    pygame.K_3: 2,
    pygame.K_4: 3,
}


def handle_key_event(app, event: pygame.event.Event) -> None:
    if event.type != pygame.KEYDOWN:
        return
    phase = app.machine.phase
    if phase == PHASE_SETUP:
        handle_setup_key(app, event)
    elif phase == PHASE_PREDICTION:
        handle_prediction_key(app, event)
    elif phase == PHASE_ACTION:
        handle_action_key(app, event)
    elif phase == PHASE_RESULTS:
        handle_results_key(app, event)


def handle_setup_key(app, event: pygame.event.Event) -> None:
    machine = app.machine
    if event.key in DIGIT_KEYS:
        machine.select_variant(DIGIT_KEYS[event.key])
        return
    if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
        machine.confirm_setup()


def handle_prediction_key(app, event: pygame.event.Event) -> None:
    machine = app.machine
    if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
        machine.submit_estimate()
        return
    if event.key == pygame.K_ESCAPE:
        machine.back()
        return
    if event.key == pygame.K_BACKSPACE:
        machine.erase_estimate()
        return
    char = read_text_char(event)
    if char is not None:
        machine.type_estimate(char)


def handle_action_key(app, event: pygame.event.Event) -> None:
    machine = app.machine
    state = machine.state
    if state.confirming_stop:
        if event.key in (pygame.K_y, pygame.K_RETURN, pygame.K_KP_ENTER):
            machine.confirm_stop()
        elif event.key in (pygame.K_n, pygame.K_ESCAPE):
            machine.cancel_stop()
        return
    if not state.running:
        if event.key == pygame.K_SPACE:
            machine.start_timer()
        return
    if event.key == pygame.K_ESCAPE:
        machine.request_stop()
        return
    if event.key == pygame.K_TAB:
        if event.mod & pygame.KMOD_SHIFT:
            machine.focus_previous()
        else:
            machine.focus_next()
        return
    if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
        machine.focus_next()
        return
    if event.key == pygame.K_BACKSPACE:
        machine.erase_char()
        return
    char = read_text_char(event)
    if char is not None:
        machine.type_char(char)


def handle_results_key(app, event: pygame.event.Event) -> None:
    if event.key == pygame.K_r:
        app.machine.reset()


def handle_mouse(app, pos: tuple[int, int]) -> None:
    machine = app.machine
    phase = machine.phase
    button = app.ui.hit_button(pos)

    # кнопка дашборда есть на каждом экране
    if button == "admin":
        app.open_dashboard()
        return

    if phase == PHASE_SETUP:
        for index, rect in enumerate(app.ui.variant_rects):
            if rect.collidepoint(pos):
                machine.select_variant(index)
                return
        if button == "continue":
            machine.confirm_setup()
        return

    if phase == PHASE_PREDICTION:
        if button == "lock":
            machine.submit_estimate()
        elif button == "back":
            machine.back()
        return

    if phase == PHASE_ACTION:
        if machine.state.confirming_stop:
            if button == "confirm_stop":
                machine.confirm_stop()
            elif button == "cancel_stop":
                machine.cancel_stop()
            return
        if button == "start":
            machine.start_timer()
            return
        if button == "stop":
            machine.request_stop()
            return
        field = app.ui.hit_field(pos)
        if field is not None:
            machine.focus(*field)
        return

    if phase == PHASE_RESULTS and button == "reset":
        machine.reset()
