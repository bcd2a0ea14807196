# qlemu

`qlemu` is a set of host-side building blocks for a Sinclair QL or nextp8
emulator, written in plain Python with no dependencies outside the standard
library: option and ini-file handling, a directory device table, a
sector-addressed block device, screen memory decoding, key and pointer
mapping, display scaling and shader source helpers, machine memory layout,
and a few debugging aids.

## Modules

| Module | What it provides |
| --- | --- |
| `qlemu.options` | `EmulatorOptions` (command line, ini file, `string` / `integer` lookups, `help_text`), `DeviceTable` / `DeviceEntry` for `NAMEn,path,flags` device definitions, `replace_pid` for a `%x` in paths |
| `qlemu.bdi` | `BlockDeviceInterface`: 512-byte sectors of an image file read and written one byte at a time |
| `qlemu.framebuffer` | `FrameDecoder` turning QL mode 4 / mode 8 and nextp8 screen memory into RGB tuples; `palette`, `p8_color_index`, `aspect_ratio`, `window_geometry` |
| `qlemu.keyboard` | `KeyTranslator` turning host (SDL) key symbols into `(modifiers, code)` entries, `KeyRows` for the keyboard matrix, `keyboard_layout` / `KeyboardType` |
| `qlemu.pointer` | `map_mouse` from window to screen coordinates, `Rect`, and `JoystickState` for joystick-as-keys input |
| `qlemu.shaders` | `fit_viewport`, `distort`, `read_curve`, `shader_header`, `build_shader_source`, `mouse_to_screen` |
| `qlemu.machine` | `resolve_rom_path`, `load_rom`, `memory_top`, and `screen_layout` returning a `ScreenGeometry` |
| `qlemu.trace` | `Tracer` with address ranges and a 100-entry ring of `BacktraceEvent` records; `exception_name` |
| `qlemu.pend` | `check_pending` to poll a descriptor for reading, writing or errors without waiting |
| `qlemu.hexdump` | `hexdump` / `print_hexdump` in the hex-plus-ASCII layout, sixteen bytes per line |

## Examples

Dump a block of memory:

```python
from qlemu.hexdump import hexdump

print(hexdump(b"QL ROM header\x00\x01\x02"), end="")
```

Read options; `parse` returns `False` when the config file cannot be read:

```python
from qlemu.options import EmulatorOptions

opts = EmulatorOptions(nextp8=False)
ok = opts.parse(["--sysrom", "JS.rom", "-f", "sqlux.ini"])
opts.string("sysrom")     # "JS.rom"
opts.integer("sound")     # 8 unless set elsewhere
```

Decode one mode 4 word into eight pixels:

```python
from qlemu.framebuffer import FrameDecoder

pixels = FrameDecoder().decode_ql(b"\xff\x00", mode=4)
```

Work out the window for a screen:

```python
from qlemu.framebuffer import aspect_ratio, window_geometry

window_geometry(512, 256, aspect_ratio(2), "2x")   # (width, height, "window")
```

Read a sector through the block device:

```python
from qlemu.bdi import BlockDeviceInterface

with BlockDeviceInterface("disk.img") as bdi:
    bdi.select(1)
    bdi.set_address_low(0)
    bdi.command(2)
    first_byte = bdi.read_data()
```

## Notes

- `KeyTranslator` maps keys through the nextp8 key table (cursor keys,
  letters, Tab, Return, Escape, left Shift) plus the editing and keypad
  keys. The layout name only decides whether right Alt acts as AltGr
  (ES and IT); there are no per-country key tables.
- `screen_layout` with `nextp8=True` (the default) always gives the fixed
  128x128 nextp8 screen.

## What the package does not do

There is no command to run and no emulator loop: the package does not
execute 68000 code, open a window, play sound or read the host clock in QL
time. It supplies the pieces such a program would call.

## Tests

The tests use pytest and live in `tests/`; install the `test` extra to get
it.