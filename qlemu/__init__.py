"""Host-side building blocks for a Sinclair QL and nextp8 emulator."""

__version__ = "0.1.0"

__all__ = [
    "bdi",
    "framebuffer",
    "hexdump",
    "keyboard",
    "machine",
    "options",
    "pend",
    "pointer",
    "shaders",
    "trace",
]