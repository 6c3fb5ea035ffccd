import pygame

TICK_EVENT = pygame.USEREVENT + 1


class PygameTicker:
    """Periodic TICK_EVENT через pygame.time.set_timer; interval 0 отменяет таймер."""

    def __init__(self, interval_ms: int = 100, event_type: int = TICK_EVENT) -> None:
        self.interval_ms = max(1, int(interval_ms))
        self.event_type = event_type
        self.active = False

    def start(self) -> None:
        self.stop()
        pygame.time.set_timer(self.event_type, self.interval_ms)
        self.active = True

    def stop(self) -> None:
        if not self.active:
            return
        pygame.time.set_timer(self.event_type, 0)
        self.active = False
