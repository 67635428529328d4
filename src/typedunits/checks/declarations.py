"""
Сверка статических объявлений с runtime operator table.

Статическая гарантия держится на типизированных операторах concrete types,
runtime — на OperatorTable реестра. Эта проверка не даёт им разойтись:
она выполняется в UnitRegistry.seal(), то есть при импорте доменного модуля.

Правила:
1. Каждая типизированная сигнатура ``__mul__(self, other: R) -> Result``
   класса L соответствует записи ``L * R -> Result`` в таблице (для ``+`` так же)
2. Каждая явная запись видна type checker'у через метод левого типа
3. Generic сигнатура (TypeVar) допустима только у ``__mul__`` scalar type
4. Класс, переопределивший ``__add__``, сохраняет сигнатуру ``(T) -> T``
"""

import typing
from typing import TYPE_CHECKING, Any, Callable, Final, TypeVar

from ..core.errors import DeclarationMismatchError

if TYPE_CHECKING:
    from ..core.registry import UnitRegistry


OPERATOR_METHODS: Final[dict[str, str]] = {"+": "__add__", "*": "__mul__"}


def declared_signatures(cls: type, method: str) -> list[tuple[Any, Any]]:
    """
    Типизированные сигнатуры метода, объявленного в самом классе.

    Returns:
        [(тип other, тип результата)] — по одной паре на overload
    """
    fn = cls.__dict__.get(method)
    if fn is None:
        return []

    variants: list[Callable[..., Any]] = list(typing.get_overloads(fn)) or [fn]
    signatures = []
    for variant in variants:
        hints = typing.get_type_hints(variant)
        code = variant.__code__
        params = [name for name in code.co_varnames[: code.co_argcount] if name != "self"]
        other = hints.get(params[0]) if params else None
        signatures.append((other, hints.get("return")))
    return signatures


def verify_declarations(registry: "UnitRegistry") -> None:
    """
    Raises:
        DeclarationMismatchError: список всех найденных расхождений
    """
    table = registry.operators
    scalar = table.scalar_type
    problems: list[str] = []
    declared: set[tuple[str, type, Any]] = set()

    for cls in registry.concrete_types():
        for op, method in OPERATOR_METHODS.items():
            signatures = declared_signatures(cls, method)

            if op == "+" and signatures and not any(o is cls and r is cls for o, r in signatures):
                problems.append(f"{cls.__name__}.__add__ drops the same-type sum ({cls.__name__}) -> {cls.__name__}")

            for other, result in signatures:
                if isinstance(other, TypeVar):
                    if op != "*" or cls is not scalar:
                        problems.append(
                            f"{cls.__name__}.{method} is generic but {cls.__name__} is not the scalar type"
                        )
                    elif result is not other:
                        problems.append(f"{cls.__name__}.{method} must return its operand type")
                    continue

                if op == "+" and other is cls:
                    # generic sum
                    continue

                declared.add((op, cls, other))
                entry = table.entry(op, cls, other)
                if entry is None:
                    problems.append(
                        f"{cls.__name__}.{method}({_name(other)}) has no operator entry in {registry.name!r}"
                    )
                elif entry.result is not result:
                    problems.append(
                        f"{cls.__name__}.{method}({_name(other)}) returns {_name(result)}, "
                        f"table says {entry.result.__name__}"
                    )

    for entry in table.entries():
        if (entry.op, entry.left, entry.right) not in declared:
            method = OPERATOR_METHODS[entry.op]
            problems.append(f"{entry.describe()} is not declared on {entry.left.__name__}.{method}")

    if problems:
        raise DeclarationMismatchError(problems)


def _name(obj: Any) -> str:
    return getattr(obj, "__name__", repr(obj))
