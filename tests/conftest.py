"""Shared pytest fixtures for cmdpalette tests."""

import os
import tempfile

# Keep config and log files out of the real home directory
os.environ["CMDPALETTE_CONFIG_DIR"] = tempfile.mkdtemp(prefix="cmdpalette-test-")
os.environ.pop("CMDPALETTE_DEBUG", None)

import pytest

from cmdpalette.palette.palette_loaders import StaticCommandLoader
from cmdpalette.palette.palette_manager import CommandManager
from cmdpalette.palette.palette_presenter import PalettePresenter
from palette_fixtures import DIM, make_commands


@pytest.fixture
def executed():
    return []


@pytest.fixture
def scene_titles():
    return ["Player", "Main Camera", "Directional Light", "Enemy Spawner", "Canvas"]


@pytest.fixture
def manager(scene_titles, executed):
    return CommandManager([StaticCommandLoader(make_commands(scene_titles, executed))])


@pytest.fixture
def presenter():
    return PalettePresenter(display_cap=8, debug=False, dim_color=DIM)
