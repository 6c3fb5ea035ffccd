from typing import Optional

import pygame


def read_text_char(event: pygame.event.Event) -> Optional[str]:
    if event.type != pygame.KEYDOWN:
        return None
    char = getattr(event, "unicode", "") or ""
    if len(char) != 1 or not char.isprintable():
        return None
    return char
