"""Validation Engine — walks an object's constraints and produces violations.

This is the main entry point for object validation. It reads constraint
declarations, runs the registered validator for each one and resolves the
message of every failed check.

Usage:
    engine = ValidationEngine()
    violations = engine.validate(customer, prefix="customer", locale="pt_BR")
    if violations:
        # Hand them to an ErrorCollector / the view
"""

import time
from typing import Any, Iterable, Optional

import structlog

from formguard.exceptions import ConstraintEvaluationError, FormguardError
from formguard.messages import VALIDATED_VALUE, MessageInterpolator
from formguard.validators.constraints import DEFAULT_GROUP, Constraint, Valid
from formguard.validators.metadata import (
    ConstraintSet,
    ObjectDescriptor,
    describe,
    field_value,
)
from formguard.validators.models import ValidationContext, Violation
from formguard.validators.registry import ConstraintRegistry, default_registry

logger = structlog.get_logger()


def join_path(prefix: str, name: str) -> str:
    if not prefix:
        return name
    if name.startswith("["):
        return prefix + name
    return f"{prefix}.{name}"


class _Pass:
    """State of one validation pass: groups, locale, context and results."""

    def __init__(
        self,
        engine: "ValidationEngine",
        groups: tuple[str, ...],
        locale: Optional[str],
        context: ValidationContext,
    ):
        self.engine = engine
        self.groups = groups
        self.locale = locale
        self.context = context
        self.violations: list[Violation] = []
        self._ancestors: set[int] = set()

    def walk(self, obj: Any, path: str, descriptor: ObjectDescriptor) -> None:
        if obj is None or descriptor.is_empty:
            return
        marker = id(obj)
        if marker in self._ancestors:
            return  # cycle

        self._ancestors.add(marker)
        try:
            for f in descriptor.fields:
                value = field_value(obj, f.name)
                category = join_path(path, f.name)
                for constraint in f.constraints:
                    self.check(value, constraint, category)
                if f.cascade:
                    self.cascade(value, category)

            for constraint in descriptor.object_constraints:
                self.check(obj, constraint, path)
        finally:
            self._ancestors.discard(marker)

    def cascade(self, value: Any, category: str) -> None:
        if value is None:
            return
        if isinstance(value, dict):
            items = [(f"{category}[{key}]", item) for key, item in value.items()]
        elif isinstance(value, (list, tuple)):
            items = [(f"{category}[{i}]", item) for i, item in enumerate(value)]
        else:
            self.walk(value, category, describe(value))
            return

        for item_category, item in items:
            self.walk(item, item_category, describe(item))

    def check(self, value: Any, constraint: Constraint, category: str) -> None:
        if not constraint.applies_to(self.groups):
            return

        validator = self.engine.registry.get(constraint.kind)
        try:
            valid = validator.is_valid(value, constraint, self.context.at(category))
        except FormguardError:
            raise
        except Exception as e:
            logger.error(
                "constraint_evaluation_failed",
                kind=constraint.kind,
                category=category,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise ConstraintEvaluationError(constraint.kind, category, e) from e

        if not valid:
            self.violations.append(
                self.engine.build_violation(value, constraint, category, self.locale)
            )


class ValidationEngine:
    """Evaluates declared constraints and produces ordered violations.

    Design principles:
        - Deterministic: fields in declaration order, constraints in declared
          order, object-level constraints last
        - Violations are data; only faults are raised
        - Collaborators for custom validators arrive through the context
    """

    def __init__(
        self,
        registry: Optional[ConstraintRegistry] = None,
        interpolator: Optional[MessageInterpolator] = None,
    ):
        self.registry = registry or default_registry()
        self.interpolator = interpolator or MessageInterpolator()

    def validate(
        self,
        obj: Any,
        *,
        prefix: str = "",
        groups: Optional[Iterable[str]] = None,
        locale: Optional[str] = None,
        context: Optional[ValidationContext] = None,
        constraints: Optional[ConstraintSet] = None,
    ) -> list[Violation]:
        """Validate every declared constraint of an object.

        Args:
            obj: pydantic model, dataclass, plain object, or a mapping when
                ``constraints`` is given
            prefix: Category prefix, e.g. "customer" -> "customer.name"
            groups: Groups to evaluate; ("default",) when None
            locale: Locale for message resolution
            context: Services and clock for validators
            constraints: Explicit declarations that replace annotations

        Returns:
            Violations in evaluation order (empty if valid)

        Raises:
            ConstraintEvaluationError: a validator failed (e.g. a lookup)
            ConstraintDefinitionError: a declaration does not fit the value
            UnknownConstraintError: no validator for a declared kind
        """
        start_time = time.perf_counter()

        run = self._pass(groups, locale, context)
        run.walk(obj, prefix, describe(obj, constraints))

        logger.info(
            "validation_complete",
            target=type(obj).__name__,
            prefix=prefix,
            violations=len(run.violations),
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return run.violations

    def validate_value(
        self,
        value: Any,
        constraints: Iterable[Constraint],
        *,
        category: str,
        groups: Optional[Iterable[str]] = None,
        locale: Optional[str] = None,
        context: Optional[ValidationContext] = None,
    ) -> list[Violation]:
        """Validate a single value, such as a handler parameter."""
        run = self._pass(groups, locale, context)
        cascade = False
        for constraint in constraints:
            if isinstance(constraint, Valid):
                cascade = True
                continue
            run.check(value, constraint, category)
        if cascade:
            run.cascade(value, category)
        return run.violations

    def validate_property(
        self,
        obj: Any,
        name: str,
        *,
        prefix: str = "",
        groups: Optional[Iterable[str]] = None,
        locale: Optional[str] = None,
        context: Optional[ValidationContext] = None,
        constraints: Optional[ConstraintSet] = None,
    ) -> list[Violation]:
        """Validate the constraints of one field of an object."""
        field = describe(obj, constraints).field_named(name)
        if field is None:
            return []
        declared = list(field.constraints) + ([Valid()] if field.cascade else [])
        return self.validate_value(
            field_value(obj, name),
            declared,
            category=join_path(prefix, name),
            groups=groups,
            locale=locale,
            context=context,
        )

    def build_violation(
        self,
        value: Any,
        constraint: Constraint,
        category: str,
        locale: Optional[str] = None,
    ) -> Violation:
        """Resolve the message of a failed constraint into a Violation."""
        template = constraint.message or self.registry.default_message(constraint.kind)
        params = {**constraint.attributes(), VALIDATED_VALUE: value}
        return Violation(
            category=category,
            message=self.interpolator.interpolate(template, params, locale),
            severity=constraint.severity,
            code=constraint.kind,
            invalid_value=value,
        )

    def _pass(self, groups, locale, context) -> _Pass:
        if isinstance(groups, str):
            groups = (groups,)
        return _Pass(
            engine=self,
            groups=tuple(groups) if groups else (DEFAULT_GROUP,),
            locale=locale,
            context=context or ValidationContext(),
        )


# Module-level singleton
validation_engine = ValidationEngine()
