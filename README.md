# beepkit

Building blocks for making sound on the PC speaker and for talking to the
low-level interfaces that need. It has no third-party dependencies.

## Modules

- `beepkit.note`: musical notes in twelve-tone equal temperament with A4 = 440 Hz. `Note.parse` reads notes like `"C4#"`, `"c4s"` or `"B2b"`. A note converts to and from semitone numbers (`Note.from_semitone`, `Note.semitone_number`) and gives its frequency (`Note.freq`). `Note.find_nearest` finds the note closest to a frequency. Enharmonic spellings compare equal, so `C4#` equals `D4b`.
- `beepkit.sound_emitter`: `BeeperFrequency` and `BeeperDivisor` hold values for the 1 193 182 Hz timer clock and its 16-bit divisor. The module also defines the abstract `SoundEmitter` interface.
- `beepkit.beeper`: `Beeper` drives the speaker over a `PortAccessor`.
  - It reads the speaker control port once, in `prepare`.
  - `prepare` raises `BeeperError` if a port access fails.
  - Later port failures are ignored.
- `beepkit.port_beeper`: `PortBeeper` drives the speaker over a `PortAccessor` as well.
  - It reads the control port again before every change.
  - Port errors reach the caller.
  - `PortBeeper.is_iopl_raised(eflags)` tests the I/O privilege bits of a flags value.
- `beepkit.nano_sleep`: `NanoSleep` busy-waits on a tick clock, by default `time.perf_counter_ns`.
  - `NanoSleep.calibrate` measures the clock rate.
  - `calibrate_correction` measures the call overhead, dropping outliers with `filter_outliers`, which uses interquartile ranges.
- `beepkit.inpout_interface`: the request layout of a port and physical-memory access driver. It defines:
  - the function numbers (`Func`) and the port widths (`PortWidth`);
  - `make_ioctl`;
  - the 32- and 64-bit mapping records (`Mapping32`, `Mapping64`) and `PhysMapping`;
  - the `InpoutError` family of exceptions.
- `beepkit.inpout`: the driver logic.
  - `Inpout` reads and writes ports and maps and unmaps physical memory over an abstract `Device`.
  - `load` opens the device. When that fails, it opens, creates, starts, or deletes and recreates the service through an abstract `ServiceManager` and `Service`.
  - `extract_driver` writes a driver image you supply to `inpout.sys` in the parent of a directory.
- `beepkit.phys_ranges`: `parse_resource_list` turns a binary physical-memory resource list into `PhysicalRegion` objects with their access flags.
- `beepkit.trap_frame`: `TrapFrame` is the binary layout of the 64-bit kernel trap frame. It offers `TrapFrame.unpack_from`, `TrapFrame.pack` and `field_offset`.
- `beepkit.thread_context`: thread and memory-mapping interfaces.
  - `ThreadContext` and `ThreadState` hold register state.
  - `ThreadControl`, `Mapper` and `Mapping` are the abstract interfaces.
  - The context managers are `suspended` and `context_restored`.

## Installation

```
pip install .
```

## Notes

```python
from beepkit.note import Note

note = Note.parse("c4s")
print(note, note.freq())           # C4# 277.18...
print(Note.find_nearest(440.0))    # A4
print(Note.from_semitone(16))      # E1
```

Invalid input raises `ValueError`.

## Driving a speaker

Subclass `beepkit.beeper.PortAccessor`, implementing `read_byte(port)` and `write_byte(port, value)`. They should raise `OSError` on failure. Then:

```python
from beepkit.beeper import Beeper
from beepkit.sound_emitter import BeeperFrequency

beeper = Beeper(ports)
beeper.prepare()
beeper.set_frequency(BeeperFrequency.clamped(440))
beeper.play()
beeper.mute()
```

Frequencies outside the timer's range are clamped by `BeeperFrequency.clamped` and `BeeperFrequency.from_float`. `BeeperFrequency(...)` raises `ValueError` when given such a frequency.

## What this package does not do

- There is no command-line program.
- No operating-system backends are included. You supply the real port accessor, driver `Device`, `ServiceManager`, `ThreadControl` and `Mapper`.
- No driver image is bundled.
- The package does not raise a thread's I/O privilege level. It provides the pieces such a step would use: resource-list parsing, the trap frame layout and the thread-context helpers. It does not search physical memory for the trap frame or patch it.

## Tests

```
pip install .[test]
pytest
```