"""Tests for CLI argument parsing and basic command execution."""

import subprocess
import sys
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from geotype.errors import InputError
from geotype.main import build_options, load_config, main, parse_bbox, parse_tile
from geotype.tiles import BBox
from tests.conftest import collection, feature, line, point, strip_ansi_codes


def grid_lines(result):
    """Grid rows from stdout, ignoring any warnings mixed in from stderr."""
    text = strip_ansi_codes(result.stdout)
    return [l for l in text.split('\n') if l and not l.startswith('Warning')]


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def point_file(write_geojson):
    return write_geojson(collection(feature(point(0, 0))))


def test_help_command():
    """Test that --help works when run as a module."""
    result = subprocess.run(
        [sys.executable, "-m", "geotype.main", "--help"],
        capture_output=True,
        text=True,
        cwd=str(Path(__file__).parent.parent),
    )
    assert result.returncode == 0
    assert "usage:" in result.stdout.lower()


def test_short_help(runner):
    result = runner.invoke(main, ['-h'])
    assert result.exit_code == 0
    assert "--zoom" in result.output
    assert "--nocolor" in result.output


def test_version(runner):
    result = runner.invoke(main, ['--version'])
    assert result.exit_code == 0
    assert "geotype" in result.output


def test_missing_file(runner, temp_dir):
    result = runner.invoke(main, [str(temp_dir / "missing.geojson")])
    assert result.exit_code == 1
    assert "Error" in result.output


def test_invalid_geojson(runner, write_geojson):
    result = runner.invoke(main, [write_geojson({"type": "Topology"})])
    assert result.exit_code == 1


def test_point_default(runner, point_file):
    result = runner.invoke(main, [point_file, '--nocolor'])
    assert result.exit_code == 0
    assert grid_lines(result) == ['      ', '  <>  ', '      ']


def test_polygon_fixed_zoom(runner, write_geojson, europe_polygon):
    result = runner.invoke(main, [write_geojson(europe_polygon), '--zoom', '4', '--nocolor'])
    assert result.exit_code == 0

    lines = grid_lines(result)
    assert len(lines) == 5
    assert sum(l.count('XX') for l in lines) == 9


def test_bbox_frame(runner, point_file):
    result = runner.invoke(main, [point_file, '--bbox=-10,-10,10,10', '-z', '2', '--nocolor'])
    assert result.exit_code == 0
    assert grid_lines(result) == ['    ', '  <>']


def test_tile_frame(runner, write_geojson, europe_polygon):
    result = runner.invoke(main, [write_geojson(europe_polygon), '-t', '8/5/4', '-z', '4', '--nocolor'])
    assert result.exit_code == 0
    assert grid_lines(result) == ['XX']


def test_bbox_and_tile_conflict(runner, point_file):
    result = runner.invoke(main, [point_file, '--bbox=0,0,1,1', '-t', '0/0/0'])
    assert result.exit_code == 2


def test_bad_bbox(runner, point_file):
    result = runner.invoke(main, [point_file, '--bbox=10,0,0,1'])
    assert result.exit_code == 1


def test_frame_and_mod(runner, write_geojson):
    path = write_geojson(collection(feature(line((-40, 10), (40, 10)))))
    result = runner.invoke(main, [path, '-z', '3', '-f', '0', '--nocolor'])
    assert grid_lines(result) == ['####']

    result = runner.invoke(main, [path, '-z', '3', '--nocolor'])
    assert grid_lines(result) == ['        ', '  ####  ', '        ']

    result = runner.invoke(main, [path, '-z', '3', '-m', '1', '-f', '0', '--nocolor'])
    assert grid_lines(result) == ['########']

    result = runner.invoke(main, [path, '-z', '5', '-m', '-2', '-f', '0', '--nocolor'])
    assert grid_lines(result) == ['####']


def test_color_output(runner, point_file):
    result = runner.invoke(main, [point_file, '-z', '3'])
    assert result.exit_code == 0
    assert '\033[31;41m<>\033[0m' in result.stdout


def test_output_is_repeatable(runner, write_geojson, europe_polygon):
    path = write_geojson(europe_polygon)
    first = runner.invoke(main, [path])
    second = runner.invoke(main, [path])
    assert first.stdout == second.stdout


def test_config_file(runner, point_file, temp_dir):
    config_path = temp_dir / "geotype.yaml"
    with open(config_path, 'w') as f:
        yaml.dump({"render_defaults": {"frame": 2, "color": False}}, f)

    result = runner.invoke(main, [point_file, '-z', '5', '-c', str(config_path)])
    lines = grid_lines(result)
    assert len(lines) == 5
    assert lines[2] == '    <>    '


def test_load_config_defaults(temp_dir):
    config = load_config(str(temp_dir / "absent.yaml"))
    assert config["render_defaults"]["frame"] == 1
    assert config["render_defaults"]["color"] is True


def test_load_config_invalid(temp_dir):
    config_path = temp_dir / "geotype.yaml"
    config_path.write_text("render_defaults: [unclosed")
    with pytest.raises(InputError):
        load_config(str(config_path))


def test_parse_bbox():
    assert parse_bbox("-10,-10.5,10,10") == BBox(-10, -10.5, 10, 10)
    for bad in ["1,2,3", "a,b,c,d", "5,0,1,1"]:
        with pytest.raises(InputError):
            parse_bbox(bad)


def test_parse_tile():
    assert tuple(parse_tile("3/5/4")) == (3, 5, 4)
    for bad in ["1/2", "x/y/z", "4/0/2", "0/0/-1"]:
        with pytest.raises(InputError):
            parse_tile(bad)


def test_build_options_explicit_frame_drops_padding():
    options = build_options(load_config("does-not-exist.yaml"), bbox="0,0,1,1", frame=4, nocolor=True)
    assert options.frame_override == BBox(0, 0, 1, 1)
    assert options.frame_padding == 0
    assert options.color is False


def test_build_options_flags_override_config():
    config = {"render_defaults": {"frame": 3, "overzoom": 2, "color": True}}
    options = build_options(config, frame=0, mod=-1)
    assert options.frame_padding == 0
    assert options.overzoom == -1
    assert options.zoom is None


def test_bbox_short_flag_with_negative_values(runner, point_file):
    result = runner.invoke(main, [point_file, '-b', '-10,-10,10,10', '-z', '2', '--nocolor'])
    assert result.exit_code == 0
    assert grid_lines(result) == ['    ', '  <>']


def test_negative_frame_is_rejected(runner, point_file):
    result = runner.invoke(main, [point_file, '-z', '3', '-f', '-1', '--nocolor'])
    assert result.exit_code == 2


def test_negative_frame_in_config_is_rejected(runner, point_file, temp_dir):
    config_path = temp_dir / "geotype.yaml"
    with open(config_path, 'w') as f:
        yaml.dump({"render_defaults": {"frame": -1}}, f)

    result = runner.invoke(main, [point_file, '-z', '3', '-c', str(config_path)])
    assert result.exit_code == 1
    assert "Error" in result.output

    with pytest.raises(InputError, match="negative"):
        build_options({"render_defaults": {"frame": -1}})


def test_fractional_zoom_is_truncated(runner, write_geojson, europe_polygon):
    path = write_geojson(europe_polygon)
    fractional = runner.invoke(main, [path, '-z', '4.5', '--nocolor'])
    whole = runner.invoke(main, [path, '-z', '4', '--nocolor'])

    assert fractional.exit_code == 0
    assert grid_lines(fractional) == grid_lines(whole)
    assert build_options(load_config("does-not-exist.yaml"), zoom=4.9).zoom == 4
