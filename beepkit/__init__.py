"""PC speaker tones, musical notes, busy-wait timing and low-level I/O port helpers."""

__version__ = "0.1.0"

__all__ = [
    "note",
    "sound_emitter",
    "beeper",
    "port_beeper",
    "nano_sleep",
    "inpout_interface",
    "inpout",
    "phys_ranges",
    "trap_frame",
    "thread_context",
]