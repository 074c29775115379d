"""Keyboard state of a player, packed into the bit mask sent to the server."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntFlag


class KeyInput(IntFlag):
    """Bits of the key mask; one bit per game key."""

    NONE = 0x00
    W = 0x01
    S = 0x02
    A = 0x04
    D = 0x08
    Q = 0x10
    E = 0x20
    SPACE = 0x40
    RESERVED = 0x80


_KEY_BITS: dict[int, KeyInput] = {
    ord("W"): KeyInput.W,
    ord("S"): KeyInput.S,
    ord("A"): KeyInput.A,
    ord("D"): KeyInput.D,
    ord("Q"): KeyInput.Q,
    ord("E"): KeyInput.E,
    ord(" "): KeyInput.SPACE,
}


def _bit_for(key: int | str) -> KeyInput:
    code = ord(key) if isinstance(key, str) else int(key)
    return _KEY_BITS.get(code, KeyInput.NONE)


@dataclass
class KeyState:
    """Tracks which game keys are held; keys are virtual-key codes or characters."""

    pressed: KeyInput = field(default=KeyInput.NONE)

    def key_down(self, key) -> None:
        """Mark a key as held; keys the game does not use are ignored."""
        self.pressed |= _bit_for(key)

    def key_up(self, key) -> None:
        """Mark a key as released; keys the game does not use are ignored."""
        self.pressed &= ~_bit_for(key)

    def snapshot(self) -> KeyInput:
        """Return the mask to send and clear the one-shot fire key."""
        current = self.pressed
        self.pressed &= ~KeyInput.SPACE
        return current