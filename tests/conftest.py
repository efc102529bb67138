"""
Pytest fixtures for Linager tests.
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path_factory):
    """Point the data directory at an empty location and clear LINAGER_* overrides."""
    data_dir = tmp_path_factory.mktemp("linager_data")
    monkeypatch.setenv("LINAGER_DATA_PATH", str(data_dir))
    for name in (
        "LINAGER_INCLUDE_UNEXPORTED",
        "LINAGER_SKIP_TESTS",
        "LINAGER_SKIP_ASSET",
        "LINAGER_RECURSIVE_PACKAGES",
        "LINAGER_TOLERATE_SYNTAX_ERRORS",
        "LINAGER_MAX_WORKERS",
        "LINAGER_MAX_TOTAL_SIZE",
        "LINAGER_DEBUG",
        "LINAGER_LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
    return data_dir


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def go_project(temp_dir: Path) -> Path:
    """A two-package Go module with assets."""
    (temp_dir / "go.mod").write_text("module example.com/app\n\ngo 1.21\n")
    (temp_dir / "README.md").write_text("# App\n")
    (temp_dir / "main.go").write_text('''package main

import "example.com/app/util"

func main() {
	util.Run()
}
''')
    (temp_dir / "main_test.go").write_text('''package main

import "testing"

func TestMain(t *testing.T) {}
''')
    util = temp_dir / "util"
    util.mkdir()
    (util / "util.go").write_text('''package util

// Config holds settings
type Config struct {
	Name string
}

// Run starts the app
func Run() {}

func (c *Config) Validate() error {
	return nil
}
''')
    (util / "data.json").write_text('{"a": 1}\n')
    (util / "empty.txt").write_text("")
    return temp_dir


@pytest.fixture
def js_project(temp_dir: Path) -> Path:
    """A small JSX project."""
    (temp_dir / "package.json").write_text('{"name": "web-app", "version": "1.0.0"}\n')
    src = temp_dir / "src"
    src.mkdir()
    (src / "App.jsx").write_text('''import React from 'react';

export function App({ title }) {
  return <div>{title}</div>;
}
''')
    return temp_dir
