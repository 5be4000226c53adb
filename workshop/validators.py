# File: workshop/validators.py
"""
Workshop - Descriptor Validators
=================================
Semantic checks on a ``ModuleDescriptor`` that pydantic's per-field
validation cannot express: PHP identifier rules, composer vendor rules,
and clashes between generated class names.

Every check is a pure function returning a ``ValidationResult``;
``validate_descriptor`` runs them all and merges the results.  Names that
cannot be derived at all make ``derive()`` raise ``InvalidNameError`` before
any semantic check runs.

Usage:
    from workshop.validators import validate_descriptor
    result = validate_descriptor(descriptor)
    if result.has_errors:
        raise InvalidDescriptorError([item.message for item in result.errors])
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Set

from workshop.models import ModuleDescriptor
from workshop.naming import DerivedNameSet, derive, to_singular

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("workshop.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationIssue:
    """Lightweight issue descriptor (no pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


class ValidationResult:
    """Accumulates ``ValidationIssue`` instances produced by the checks."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationIssue] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationIssue("error", code, message, context))

    def add_warning(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationIssue("warning", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[ValidationIssue]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [e for e in self._items if e.is_warning]

    @property
    def all_items(self) -> List[ValidationIssue]:
        return list(self._items)

    @property
    def codes(self) -> List[str]:
        return [e.code for e in self._items]

    @property
    def has_errors(self) -> bool:
        return any(e.is_error for e in self._items)

    @property
    def has_warnings(self) -> bool:
        return any(e.is_warning for e in self._items)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def summary(self) -> str:
        return (
            f"Validation: {len(self.errors)} error(s), "
            f"{len(self.warnings)} warning(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary()]
        for item in self._items:
            lines.append(f"  {item.level.upper():<7} [{item.code}] {item.message}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Regex patterns & reserved words
# ---------------------------------------------------------------------------

_PHP_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_COMPOSER_VENDOR_RE: re.Pattern[str] = re.compile(r"^[a-z0-9]([_.-]?[a-z0-9]+)*$")

# Words PHP refuses as class names (keywords plus reserved type names)
_PHP_RESERVED_WORDS: FrozenSet[str] = frozenset(
    {
        "abstract", "and", "array", "as", "bool", "break", "callable", "case",
        "catch", "class", "clone", "const", "continue", "declare", "default",
        "do", "echo", "else", "elseif", "empty", "enddeclare", "endfor",
        "endforeach", "endif", "endswitch", "endwhile", "eval", "exit",
        "extends", "false", "final", "float", "for", "foreach", "function",
        "global", "goto", "if", "implements", "include", "instanceof",
        "insteadof", "int", "interface", "isset", "iterable", "list", "mixed",
        "namespace", "new", "null", "object", "or", "print", "private",
        "protected", "public", "require", "return", "static", "string",
        "switch", "throw", "trait", "true", "try", "unset", "use", "var",
        "void", "while", "xor", "yield",
    }
)


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------


def validate_module_name(descriptor: ModuleDescriptor) -> ValidationResult:
    """The module name is used verbatim as a PHP namespace segment."""
    result: ValidationResult = ValidationResult()
    name: str = descriptor.name
    ctx: Dict[str, Any] = {"module": name}

    if not _PHP_IDENTIFIER_RE.match(name):
        result.add_error(
            "INVALID_MODULE_NAME",
            f"Module name '{name}' is not a valid PHP namespace segment.",
            ctx,
        )
    elif name.lower() in _PHP_RESERVED_WORDS:
        result.add_error(
            "PHP_RESERVED_NAME",
            f"Module name '{name}' is a PHP reserved word.",
            ctx,
        )
    return result


def validate_vendor(descriptor: ModuleDescriptor) -> ValidationResult:
    result: ValidationResult = ValidationResult()
    vendor: str = descriptor.vendor.lower()

    if not _COMPOSER_VENDOR_RE.match(vendor):
        result.add_error(
            "INVALID_VENDOR_NAME",
            f"Vendor '{descriptor.vendor}' cannot be used as a composer vendor name.",
            {"vendor": descriptor.vendor},
        )
    return result


def validate_entity_names(descriptor: ModuleDescriptor) -> ValidationResult:
    """
    Check entity and value-object names for:
    - PHP reserved words as class names
    - Duplicates within each list
    - The same class name in both lists
    - An entity colliding with another entity's ``<Name>Translation`` class
    - Different entities sharing a plural form used in paths and tables
    - Names that look plural (warning only)
    """
    result: ValidationResult = ValidationResult()

    entities: List[DerivedNameSet] = [derive(n) for n in descriptor.entities]
    value_objects: List[DerivedNameSet] = [derive(n) for n in descriptor.value_objects]

    for kind, names, duplicate_code in (
        ("Entity", entities, "DUPLICATE_ENTITY"),
        ("Value object", value_objects, "DUPLICATE_VALUE_OBJECT"),
    ):
        seen: Set[str] = set()
        for names_set in names:
            studly: str = names_set.studly_singular
            ctx: Dict[str, Any] = {"name": names_set.original}
            if studly in seen:
                result.add_error(
                    duplicate_code,
                    f"{kind} '{studly}' is listed more than once.",
                    ctx,
                )
            seen.add(studly)
            if studly.lower() in _PHP_RESERVED_WORDS:
                result.add_error(
                    "PHP_RESERVED_NAME",
                    f"{kind} '{studly}' is a PHP reserved word.",
                    ctx,
                )

    # views, language files and table names are keyed by these forms
    claimed: Dict[str, str] = {}
    for entity in entities:
        for key in (f"lower:{entity.lower_plural}", f"snake:{entity.snake_plural}"):
            owner: str = claimed.setdefault(key, entity.studly_singular)
            if owner != entity.studly_singular:
                result.add_error(
                    "DUPLICATE_ENTITY_PATH",
                    f"Entities '{owner}' and '{entity.studly_singular}' would "
                    f"generate the same files ('{key.split(':', 1)[1]}').",
                    {"name": entity.original, "clashes_with": owner},
                )
                break

    entity_classes: Set[str] = {e.studly_singular for e in entities}

    for value_object in value_objects:
        if value_object.studly_singular in entity_classes:
            result.add_error(
                "ENTITY_VALUE_OBJECT_CLASH",
                f"'{value_object.studly_singular}' is both an entity and a value object.",
                {"name": value_object.original},
            )

    for entity in entities:
        if entity.translation_entity in entity_classes:
            result.add_error(
                "TRANSLATION_ENTITY_CLASH",
                f"Entity '{entity.translation_entity}' collides with the "
                f"translation class generated for '{entity.studly_singular}'.",
                {"name": entity.translation_entity},
            )
        if to_singular(entity.singular) != entity.singular:
            result.add_warning(
                "ENTITY_LOOKS_PLURAL",
                f"Entity '{entity.original}' looks plural; names are treated "
                f"as singular, so its plural form will be '{entity.plural}'.",
                {"name": entity.original},
            )

    return result


# ---------------------------------------------------------------------------
# Master entry point
# ---------------------------------------------------------------------------


def validate_descriptor(descriptor: ModuleDescriptor) -> ValidationResult:
    """
    Run every descriptor check and merge the results.

    Raises:
        InvalidNameError: If the module, an entity or a value-object name
            cannot be derived at all.
    """
    derive(descriptor.name, descriptor.vendor)

    result: ValidationResult = ValidationResult()
    validators: List[Callable[[ModuleDescriptor], ValidationResult]] = [
        validate_module_name,
        validate_vendor,
        validate_entity_names,
    ]
    for validator_fn in validators:
        logger.debug("Running validator: %s", validator_fn.__name__)
        result.merge(validator_fn(descriptor))

    if result.has_errors:
        logger.error("Descriptor for %s is invalid. %s", descriptor.name, result.summary())
    else:
        logger.info("Descriptor for %s is valid. %s", descriptor.name, result.summary())
    return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ValidationIssue",
    "ValidationResult",
    "validate_module_name",
    "validate_vendor",
    "validate_entity_names",
    "validate_descriptor",
]
