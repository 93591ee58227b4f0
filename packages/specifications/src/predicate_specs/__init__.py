from .builder import SpecificationBuilder
from .cache import CompositionCache
from .combinator import CombinatorEngine, default_engine, substitute
from .evaluator import ExpressionEvaluator, MemoryOperator, MemoryOperatorRegistry
from .exceptions import (
    EvaluationError,
    EvaluatorMismatchError,
    InvariantViolationError,
    OperatorNotFoundError,
    SpecificationError,
    TypeMismatchError,
    ValidationError,
)
from .expressions import (
    Comparison,
    FieldAccess,
    Literal,
    LogicalAnd,
    LogicalNot,
    LogicalOr,
    NodeVariant,
    Parameter,
    PredicateExpression,
    attribute,
    chain_operands,
    children,
    collect_parameters,
    compare,
    walk,
)
from .factory import SpecificationFactory
from .operators import ComparisonOperator, LogicalOperator
from .operators_memory import build_default_registry
from .specification import ISpecification, Specification
from .translation import DictTranslator, ExpressionVisitor, to_dict
from .utils import cast_value, parse_list_value

__all__ = [
    # Expressions
    "PredicateExpression",
    "NodeVariant",
    "Parameter",
    "FieldAccess",
    "Comparison",
    "Literal",
    "LogicalAnd",
    "LogicalOr",
    "LogicalNot",
    "attribute",
    "compare",
    "chain_operands",
    "children",
    "walk",
    "collect_parameters",
    # Operators
    "ComparisonOperator",
    "LogicalOperator",
    # Core types
    "ISpecification",
    "Specification",
    # Composition
    "CombinatorEngine",
    "CompositionCache",
    "default_engine",
    "substitute",
    # Evaluator / strategy
    "ExpressionEvaluator",
    "MemoryOperator",
    "MemoryOperatorRegistry",
    "build_default_registry",
    # Translation
    "ExpressionVisitor",
    "DictTranslator",
    "to_dict",
    # Builder / factory
    "SpecificationBuilder",
    "SpecificationFactory",
    # Exceptions
    "SpecificationError",
    "TypeMismatchError",
    "EvaluationError",
    "EvaluatorMismatchError",
    "InvariantViolationError",
    "ValidationError",
    "OperatorNotFoundError",
    # Utilities
    "cast_value",
    "parse_list_value",
]
