"""Smoke tests for the UI module and the CLI (no display required)."""

from __future__ import annotations

from pathlib import Path

import pytest

from meadow.simulation.observer import Observer
from meadow.ui.pygame_client import PygameObserver


def test_pygame_observer_importable() -> None:
    """PygameObserver is importable without initialising pygame."""
    observer = PygameObserver(cell_size=4, moves_per_second=7.0)
    assert isinstance(observer, Observer)
    assert observer.screen is None
    assert observer.moves_per_second == 7.0


def test_pygame_observer_idle_before_start() -> None:
    """Hooks called before the window exists do nothing."""
    observer = PygameObserver()
    observer.on_update(None)  # type: ignore[arg-type]
    observer.on_retile(None)  # type: ignore[arg-type]


def test_main_module_importable() -> None:
    """The __main__ module is importable and exposes main()."""
    from meadow.__main__ import main

    assert callable(main)


def test_main_headless_run(pond_map: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """A headless run on the sample map prints the verdict and summary."""
    from meadow.__main__ import main

    code = main(["--headless", "-i", "-w", "-s", "11", "-f", str(pond_map)])
    out = capsys.readouterr().out
    assert code == 0
    assert out.splitlines()[0] == "WIN"
    assert "Seed" in out


def test_main_unknown_agent(pond_map: Path) -> None:
    """An unknown agent name exits with status 2."""
    from meadow.__main__ import main

    assert main(["nobody", "--headless", "-w", "-f", str(pond_map)]) == 2
