import pytest

from qlemu.options import (
    DeviceTable,
    EmulatorOptions,
    OptionError,
    OptionType,
    replace_pid,
)


def test_replace_pid_substitutes_hex():
    assert replace_pid("/tmp/ql%x/", 255) == "/tmp/qlff/"


def test_replace_pid_without_marker_is_unchanged():
    assert replace_pid("/tmp/plain", 1234) == "/tmp/plain"


def test_install_directory_gets_trailing_slash(tmp_path):
    table = DeviceTable()
    entry = table.install(["win1", str(tmp_path)])
    assert entry.qname == "WIN"
    assert entry.mount_points[0] == str(tmp_path) + "/"
    assert entry.present[0] is True
    assert table.find("win") is entry


def test_install_second_drive_same_entry(tmp_path):
    table = DeviceTable()
    first = table.install(["win1", str(tmp_path)])
    second = table.install(["WIN2", str(tmp_path)])
    assert first is second
    assert second.present[:2] == [True, True]
    assert len(list(table)) == 1


def test_ram_device_flags(tmp_path):
    table = DeviceTable()
    path = str(tmp_path / "missing")
    entry = table.install(["ram1", path, "clean"])
    assert entry.mount_points[0] == path + "/"
    assert entry.clean[0] is True


@pytest.mark.parametrize("flag, where", [("native", 1), ("qdos-fs", 1), ("qdos-like", 2)])
def test_where_flags(tmp_path, flag, where):
    entry = DeviceTable().install(["flp3", str(tmp_path), flag])
    assert entry.where[2] == where


def test_drive_zero_removes(tmp_path):
    table = DeviceTable()
    table.install(["win1", str(tmp_path)])
    assert table.install(["win0"]) is None
    assert table.find("win") is None


def test_home_expansion(tmp_path):
    (tmp_path / "sub").mkdir()
    table = DeviceTable(home=str(tmp_path))
    entry = table.install(["win1", "~sub"])
    assert entry.mount_points[0] == f"{tmp_path}/sub/"


def test_full_table_rejects(tmp_path):
    table = DeviceTable(max_devices=1)
    table.install(["win1", str(tmp_path)])
    assert table.install(["flp1", str(tmp_path)]) is None
    assert table.find("flp") is None


def test_drive_without_path_not_present():
    entry = DeviceTable().install(["mdv1"])
    assert entry.present[0] is False
    assert entry.mount_points[0] is None


def test_empty_definition_raises():
    with pytest.raises(ValueError):
        DeviceTable().install([""])


def test_defaults_nextp8():
    opts = EmulatorOptions()
    assert opts.string("kbd") == "US"
    assert opts.string("rom1") == "rom.bin"
    assert opts.integer("sound") == 8
    assert opts.integer("ramtop") == 4096
    assert opts.string("sysrom") == ""


def test_defaults_ql():
    opts = EmulatorOptions(nextp8=False)
    assert opts.string("sysrom") == "MIN198.rom"
    assert opts.string("boot_device") == "mdv1"
    assert opts.integer("skip_boot") == 1
    assert opts.string("rom1") == ""


def test_unknown_names():
    opts = EmulatorOptions()
    assert opts.string("nope") == ""
    assert opts.integer("nope") == 0


def test_missing_config_returns_false(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    opts = EmulatorOptions()
    assert opts.parse([]) is False
    assert opts.config_file == "sqlux.ini"


def test_ini_values_applied(tmp_path):
    ini = tmp_path / "q.ini"
    ini.write_text("[sqlux]\n; comment\n# also comment\nKBD = DE ; trailing\nsound=3\nspeed: 1.5\n")
    opts = EmulatorOptions()
    assert opts.parse(["-f", str(ini)]) is True
    assert opts.string("kbd") == "DE"
    assert opts.integer("sound") == 3
    assert opts.string("speed") == "1.5"


def test_command_line_overrides_ini(tmp_path):
    ini = tmp_path / "q.ini"
    ini.write_text("kbd = DE\nverbose = 2\n")
    opts = EmulatorOptions()
    opts.parse(["--kbd", "GB", "-v", "3", "--config", str(ini)])
    assert opts.string("kbd") == "GB"
    assert opts.integer("verbose") == 3


def test_bad_integer_raises(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(OptionError):
        EmulatorOptions().parse(["--sound", "loud"])


def test_ql_only_option_rejected_in_nextp8(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(OptionError):
        EmulatorOptions().parse(["--sysrom", "x.rom"])


def test_device_from_command_line_and_ini(tmp_path):
    ini = tmp_path / "q.ini"
    ini.write_text(f"device = flp1,{tmp_path}\n")
    opts = EmulatorOptions(nextp8=False)
    opts.parse(["--device", f"win1,{tmp_path}", "-f", str(ini)])
    assert opts.devices.find("WIN").present[0] is True
    assert opts.devices.find("FLP").mount_points[0] == str(tmp_path) + "/"


def test_positional_arguments(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    opts = EmulatorOptions(nextp8=False)
    opts.parse(["one", "two"])
    assert opts.arguments == ["one", "two"]


def test_version_exits(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as info:
        EmulatorOptions(version="v9").parse(["--version"])
    assert info.value.code == 0
    assert capsys.readouterr().out.strip() == "v9"


def test_help_text_layout():
    opts = EmulatorOptions()
    text = opts.help_text()
    assert text.startswith("\nUsage: sqlux [OPTIONS] [args...]\n")
    assert "Positionals:" not in text
    assert text.endswith("  --version                   version number\n")
    lines = text.splitlines()
    kbd = next(line for line in lines if line.startswith("  --kbd [US]"))
    assert kbd.index("keyboard language") == 30
    verbose = next(line for line in lines if line.startswith("  -v,--verbose [1]"))
    assert verbose.endswith("verbosity level 0-3")


def test_help_text_reflects_ini(tmp_path):
    ini = tmp_path / "q.ini"
    ini.write_text("kbd = IT\n")
    opts = EmulatorOptions(nextp8=False)
    opts.load_ini(ini)
    text = opts.help_text()
    assert "--kbd [IT]" in text
    assert "Positionals:" in text


def test_spec_types():
    opts = EmulatorOptions(nextp8=False)
    kinds = {spec.name: spec.type for spec in opts.specs}
    assert kinds["device"] is OptionType.DEV
    assert kinds["speed"] is OptionType.CHAR
    assert kinds["sound"] is OptionType.INT