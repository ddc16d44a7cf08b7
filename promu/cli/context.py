from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from promu.core.config import CONFIG_FILENAME, Config, load_config
from promu.core.errors import ErrorCode
from promu.core.result import Err
from promu.output.console import ConsoleProtocol, RichConsole, Style

# Set by the top-level callback, read by every command.
CONFIG_ENV = "PROMU_CONFIG"
VERBOSE_ENV = "PROMU_VERBOSE"


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    config: Config
    console: ConsoleProtocol
    verbose: bool = False


def build_context() -> CLIContext:
    console = RichConsole()
    root = Path.cwd()

    explicit = os.environ.get(CONFIG_ENV)
    config_path = Path(explicit).expanduser() if explicit else root / CONFIG_FILENAME

    config = Config()
    if explicit or config_path.exists():
        config_result = load_config(config_path)
        if isinstance(config_result, Err):
            console.error(config_result.error.message)
            if config_result.error.hint:
                console.print(f"hint: {config_result.error.hint}", Style.DIM)
            raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))
        config = config_result.value

    return CLIContext(
        root=root,
        config=config,
        console=console,
        verbose=os.environ.get(VERBOSE_ENV) == "1",
    )
