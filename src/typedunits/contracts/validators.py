"""
Unit Table Contract

Документ unit_table описывает закрытые таблицы реестра (categories, scalar,
operator entries, transformers) в JSON. Документ коммитится рядом с кодом;
diff_table_document() ловит расхождение кода и документа на этапе CI,
а схема (JSON Schema Draft 2020-12) — некорректные документы.
"""

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterator

import jsonschema
from jsonschema import Draft202012Validator, ValidationError

if TYPE_CHECKING:
    from ..core.registry import UnitRegistry


TABLE_SCHEMA_NAME = "unit_table"
TABLE_SCHEMA_VERSION = "1"


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов из contracts/schema/ пакета.
    """

    def __init__(self, schema_dir: Path | None = None):
        self._schema_dir = schema_dir or Path(__file__).parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'unit_table')

        Raises:
            FileNotFoundError: Если файл схемы не найден
            ValueError: Если схема сама невалидна
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        # meta-validation
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}") from e

        self._schemas[schema_name] = schema
        return schema


_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# VALIDATOR
# =============================================================================


class TableDocumentValidator:
    """Валидатор документа unit_table."""

    def __init__(self, loader: SchemaLoader | None = None):
        self.schema = (loader or _SCHEMA_LOADER).load_schema(TABLE_SCHEMA_NAME)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Raises:
            ValidationError: Если документ не соответствует схеме
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]) -> Iterator[ValidationError]:
        return self.validator.iter_errors(data)


def validate_table_document(data: Dict[str, Any]) -> None:
    """
    Raises:
        ValidationError: Если документ не соответствует схеме
    """
    TableDocumentValidator().validate(data)


# =============================================================================
# EXPORT / DIFF
# =============================================================================


def export_table(registry: "UnitRegistry") -> Dict[str, Any]:
    """
    Документ unit_table для реестра.

    Generic правила (T + T, scalar * T) не перечисляются поштучно:
    они следуют из categories и scalar.
    """
    categories = [
        {
            "name": category.__name__,
            "primitive": category.primitive.__name__,
            "types": [cls.__name__ for cls in registry.concrete_types(category)],
        }
        for category in registry.categories()
    ]
    scalar = registry.operators.scalar_type
    transformers = registry.transformers

    return {
        "schema_version": TABLE_SCHEMA_VERSION,
        "registry": registry.name,
        "categories": categories,
        "scalar": scalar.__name__ if scalar is not None else None,
        "operators": [
            {
                "op": entry.op,
                "left": entry.left.__name__,
                "right": entry.right.__name__,
                "result": entry.result.__name__,
            }
            for entry in registry.operators.entries()
        ],
        "transformers": {
            "defaults": {cat.__name__: _fn_name(fn) for cat, fn in transformers.defaults().items()},
            "overrides": {cls.__name__: _fn_name(fn) for cls, fn in transformers.overrides().items()},
        },
    }


def diff_table_document(registry: "UnitRegistry", document: Dict[str, Any]) -> list[str]:
    """
    Расхождения между кодом реестра и документом.

    Документ сначала проверяется схемой.

    Returns:
        Список расхождений (пустой — документ актуален)

    Raises:
        ValidationError: Если документ не соответствует схеме
    """
    validate_table_document(document)
    actual = export_table(registry)
    problems: list[str] = []

    for key in ("registry", "scalar"):
        if document[key] != actual[key]:
            problems.append(f"{key}: document={document[key]!r}, code={actual[key]!r}")

    doc_categories = {c["name"]: c for c in document["categories"]}
    code_categories = {c["name"]: c for c in actual["categories"]}
    for name in sorted(doc_categories.keys() | code_categories.keys()):
        doc_cat, code_cat = doc_categories.get(name), code_categories.get(name)
        if doc_cat is None or code_cat is None:
            where = "document" if doc_cat is None else "code"
            problems.append(f"category {name}: missing in {where}")
            continue
        if doc_cat["primitive"] != code_cat["primitive"]:
            problems.append(f"category {name}: primitive {doc_cat['primitive']} != {code_cat['primitive']}")
        if set(doc_cat["types"]) != set(code_cat["types"]):
            problems.append(
                f"category {name}: types {sorted(doc_cat['types'])} != {sorted(code_cat['types'])}"
            )

    doc_ops = {_op_key(e) for e in document["operators"]}
    code_ops = {_op_key(e) for e in actual["operators"]}
    for key in sorted(doc_ops - code_ops):
        problems.append(f"operator {_op_str(key)}: missing in code")
    for key in sorted(code_ops - doc_ops):
        problems.append(f"operator {_op_str(key)}: missing in document")

    for level in ("defaults", "overrides"):
        if document["transformers"][level] != actual["transformers"][level]:
            problems.append(
                f"transformers.{level}: document={document['transformers'][level]!r}, "
                f"code={actual['transformers'][level]!r}"
            )

    return problems


def load_table_document(name: str) -> Dict[str, Any]:
    """
    Закоммиченный документ из contracts/tables/ (например, 'physics').

    Raises:
        FileNotFoundError: Если документа нет
    """
    path = Path(__file__).parent / "tables" / f"{name}.json"
    if not path.exists():
        raise FileNotFoundError(f"Table document not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _op_key(entry: Dict[str, str]) -> tuple[str, str, str, str]:
    return (entry["op"], entry["left"], entry["right"], entry["result"])


def _op_str(key: tuple[str, str, str, str]) -> str:
    op, left, right, result = key
    return f"{left} {op} {right} -> {result}"


def _fn_name(fn: Any) -> str:
    return getattr(fn, "__name__", repr(fn))
