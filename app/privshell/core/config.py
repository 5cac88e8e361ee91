"""Configuration model and file I/O.

The configuration lives in ``config.toml`` under the XDG config
directory. A missing file means all defaults apply.
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from privshell.core.errors import ConfigError, ConfigParseError, ConfigValidationError
from privshell.core.paths import get_config_path

DEFAULT_UTILBOX_CANDIDATES = ("toybox", "busybox")


class ShellConfig(BaseModel):
    """Settings for shell access, utility binary resolution and file reads.

    Attributes:
        utilbox_candidates: Utility binaries to probe, in order.
        su_command: Shell prefix for commands run with elevated privileges.
        sh_command: Shell prefix for commands run as the current user.
        timeout: Seconds to wait for each command line (None waits forever).
        max_read_retries: Reopen attempts after a premature end-of-stream.
        chunk_size: Bytes requested per read when copying files.
    """

    model_config = ConfigDict(extra="forbid")

    utilbox_candidates: Annotated[
        list[str],
        Field(min_length=1, description="Utility binaries to probe, in order"),
    ] = list(DEFAULT_UTILBOX_CANDIDATES)
    su_command: Annotated[
        list[str],
        Field(min_length=1, description="Privileged shell invocation prefix"),
    ] = ["su", "-c"]
    sh_command: Annotated[
        list[str],
        Field(min_length=1, description="Unprivileged shell invocation prefix"),
    ] = ["sh", "-c"]
    timeout: Annotated[float | None, Field(gt=0, description="Command timeout in seconds")] = 20.0
    max_read_retries: Annotated[int, Field(ge=1, description="File read retry budget")] = 10
    chunk_size: Annotated[int, Field(gt=0, description="Read chunk size in bytes")] = 65536


def load_config(path: Path | None = None) -> ShellConfig:
    """Load and validate the configuration file.

    Args:
        path: Path to the configuration file. If None, uses the default path.

    Returns:
        Validated ShellConfig; defaults if the file does not exist.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
        ConfigError: If the file cannot be read.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        return ShellConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return ShellConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid config content: {e}") from e


def save_config(config: ShellConfig, path: Path | None = None) -> Path:
    """Save the configuration to a TOML file.

    The file is written to a temporary file in the same directory first
    and then moved into place with os.replace().

    Args:
        config: The configuration to save.
        path: Target path. If None, uses the default path.

    Returns:
        Path where the configuration was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    # TOML has no null; an unset timeout is written by omission
    data = config.model_dump(exclude_none=True)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path
