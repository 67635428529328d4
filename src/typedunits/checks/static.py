"""
Статическая проверка snippet'ов через mypy.

Недопустимые комбинации единиц должны не проходить type checking, а не падать
во время выполнения. Этот модуль прогоняет изолированный snippet через mypy
с пакетом typedunits на mypy_path и возвращает ошибки по строкам snippet'а.
Используется тестами, доказывающими, что ``Velocity * Velocity`` не компилируется.
"""

import re
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, Optional

from mypy import api as mypy_api

from ..core.logging import logger

SNIPPET_NAME: Final[str] = "snippet.py"

# snippet.py:12: error: Unsupported operand types for * ("Velocity" and "Velocity")  [operator]
_ERROR_RE = re.compile(r"^(?P<file>[^:]+):(?P<line>\d+): error: (?P<message>.*?)(?:\s+\[(?P<code>[\w-]+)\])?$")


@dataclass(frozen=True)
class StaticError:
    line: int
    message: str
    code: Optional[str]


@dataclass(frozen=True)
class StaticCheckResult:
    """Результат mypy для одного snippet'а."""

    exit_status: int
    errors: tuple[StaticError, ...] = field(default_factory=tuple)
    report: str = ""

    @property
    def ok(self) -> bool:
        return not self.errors

    def error_lines(self) -> set[int]:
        return {error.line for error in self.errors}

    def errors_on(self, line: int) -> list[StaticError]:
        return [error for error in self.errors if error.line == line]


def package_root() -> Path:
    """Каталог, содержащий пакет typedunits (src/ в checkout)."""
    return Path(__file__).resolve().parents[2]


def run_mypy(source: str, *, strict: bool = False) -> StaticCheckResult:
    """
    Type-check snippet'а.

    Ошибки импортированных модулей подавляются (follow_imports=silent),
    в результат попадают только строки самого snippet'а.

    Args:
        source: код snippet'а
        strict: включить --strict

    Returns:
        StaticCheckResult
    """
    with tempfile.TemporaryDirectory(prefix="typedunits-mypy-") as tmp:
        workdir = Path(tmp)
        snippet = workdir / SNIPPET_NAME
        snippet.write_text(source, encoding="utf-8")

        config = workdir / "mypy.ini"
        config.write_text(
            "[mypy]\n"
            f"mypy_path = {package_root()}\n"
            "follow_imports = silent\n"
            "show_error_codes = True\n"
            "no_error_summary = True\n"
            "hide_error_context = True\n"
            "show_column_numbers = False\n",
            encoding="utf-8",
        )

        args = [
            str(snippet),
            "--config-file",
            str(config),
            "--cache-dir",
            str(workdir / ".mypy_cache"),
        ]
        if strict:
            args.append("--strict")

        stdout, stderr, exit_status = mypy_api.run(args)

    errors = tuple(_parse_errors(stdout))
    logger.debug(f"mypy snippet: exit={exit_status}, errors={len(errors)}")
    if exit_status not in (0, 1):
        # exit 2: ошибка самого mypy (конфиг, синтаксис), не результат проверки
        raise RuntimeError(f"mypy failed to run: {stderr or stdout}")
    return StaticCheckResult(exit_status=exit_status, errors=errors, report=stdout)


def run_mypy_file(path: Path, *, strict: bool = False) -> StaticCheckResult:
    return run_mypy(Path(path).read_text(encoding="utf-8"), strict=strict)


def _parse_errors(report: str) -> list[StaticError]:
    errors = []
    for line in report.splitlines():
        match = _ERROR_RE.match(line.strip())
        if match is None or Path(match.group("file")).name != SNIPPET_NAME:
            continue
        errors.append(
            StaticError(
                line=int(match.group("line")),
                message=match.group("message"),
                code=match.group("code"),
            )
        )
    return errors
