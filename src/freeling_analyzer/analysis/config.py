from __future__ import annotations

import os
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .errors import ConfigurationError

DEFAULT_ANALYZER_PATH = Path("/usr/local/bin/analyzer")
DEFAULT_SHARE_PATH = Path("/usr/local/share/freeling")
SHARE_PATH_ENV = "FREELINGSHARE"


class InputFormat(str, Enum):
    PLAIN = "plain"
    TOKEN = "token"
    SPLITTED = "splitted"
    MORFO = "morfo"
    TAGGED = "tagged"


class OutputFormat(str, Enum):
    PLAIN = "plain"
    TOKEN = "token"
    SPLITTED = "splitted"
    MORFO = "morfo"
    TAGGED = "tagged"

    @property
    def has_sentence_boundaries(self) -> bool:
        return self is not OutputFormat.TOKEN


def _coerce_enum(enum_cls, value: Union[str, Enum], field_name: str):
    if isinstance(value, enum_cls):
        return value
    raw = value.value if isinstance(value, Enum) else str(value)
    try:
        return enum_cls(raw.lower())
    except ValueError as exc:
        choices = ", ".join(item.value for item in enum_cls)
        raise ConfigurationError(
            f"unsupported {field_name}: {raw!r} (expected one of: {choices})",
            kind=field_name,
        ) from exc


@dataclass(frozen=True)
class AnalyzerOptions:
    """Settings for one analyzer binary invocation."""

    share_path: Path = DEFAULT_SHARE_PATH
    analyzer_path: Path = DEFAULT_ANALYZER_PATH
    input_format: InputFormat = InputFormat.PLAIN
    output_format: OutputFormat = OutputFormat.TAGGED
    memoize: bool = True
    language: str = "es"
    config_path: Optional[Path] = None
    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "share_path", Path(self.share_path))
        object.__setattr__(self, "analyzer_path", Path(self.analyzer_path))
        if self.config_path is not None:
            object.__setattr__(self, "config_path", Path(self.config_path))
        object.__setattr__(self, "input_format", _coerce_enum(InputFormat, self.input_format, "input_format"))
        object.__setattr__(self, "output_format", _coerce_enum(OutputFormat, self.output_format, "output_format"))

    def with_overrides(self, **overrides: Any) -> "AnalyzerOptions":
        unknown = sorted(set(overrides) - set(self.__dataclass_fields__))
        if unknown:
            raise ConfigurationError(f"unknown option(s): {', '.join(unknown)}", kind="option")
        return replace(self, **overrides)

    @property
    def language_config_dir(self) -> Path:
        return self.share_path / "config"

    @property
    def resolved_config_path(self) -> Path:
        if self.config_path is not None:
            return self.config_path
        return self.language_config_dir / f"{self.language}.cfg"

    def validate(self) -> None:
        """Check every path the analyzer needs before anything is spawned."""

        if not self.share_path.is_dir():
            raise ConfigurationError(f"{self.share_path} not found", kind="share_path", path=self.share_path)
        if not self.analyzer_path.is_file():
            raise ConfigurationError(
                f"{self.analyzer_path} not found", kind="analyzer_path", path=self.analyzer_path
            )
        if self.config_path is not None and not self.config_path.is_file():
            raise ConfigurationError(f"{self.config_path} not found", kind="config_path", path=self.config_path)

    def build_command(self) -> List[str]:
        return [
            str(self.analyzer_path),
            "-f",
            str(self.resolved_config_path),
            "--inpf",
            self.input_format.value,
            "--outf",
            self.output_format.value,
            "--nec",
            "--noflush",
        ]

    def build_env(self, base: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        env = dict(os.environ if base is None else base)
        env[SHARE_PATH_ENV] = str(self.share_path)
        return env
