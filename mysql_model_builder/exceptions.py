"""
Custom exception hierarchy for MySQL Model Builder.

This module provides an exception system with rich context and recovery
guidance. Builders raise these when a configuration call cannot be honoured;
conflicts between server-generated values are only raised by the metadata
accessors, the fluent builders resolve them by clearing the older setting.
"""

from typing import Dict, Any, Optional, List


class ModelBuilderError(Exception):
    """
    Base exception for all MySQL Model Builder errors.

    Provides rich context and error recovery guidance.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        error_code: Optional[str] = None
    ):
        """
        Initialize the exception with context and recovery suggestions.

        Args:
            message: Human-readable error message
            context: Additional context about where/why the error occurred
            suggestions: List of potential solutions or next steps
            error_code: Unique error code for programmatic handling
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []
        self.error_code = error_code

    def __str__(self) -> str:
        """Return formatted error message with context."""
        lines = [self.message]

        if self.error_code:
            lines.append(f"Error Code: {self.error_code}")

        if self.context:
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        if self.suggestions:
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  • {suggestion}")

        return "\n".join(lines)


class ConfigurationError(ModelBuilderError):
    """Raised when builder settings are invalid or missing."""

    def __init__(self, message: str, config_file: str = None, **kwargs):
        context = kwargs.get('context', {})
        if config_file:
            context['config_file'] = config_file

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check the configuration file syntax",
                "Verify setting names and value types",
                "Remove unknown keys from the configuration file"
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="CONFIG_ERROR"
        )


class InvalidNameError(ModelBuilderError, ValueError):
    """Raised when a table, column, schema or constraint name is empty."""

    def __init__(self, argument: str, value: Any = None, **kwargs):
        context = kwargs.get('context', {})
        context['argument'] = argument
        context['value'] = repr(value)

        super().__init__(
            f"The string argument '{argument}' cannot be empty.",
            context=context,
            suggestions=kwargs.get('suggestions') or [
                "Pass None to reset the name to its conventional value",
                "Pass a non-blank string"
            ],
            error_code="INVALID_NAME"
        )


class ConflictingValueGenerationError(ModelBuilderError):
    """Raised when two server-generated value settings are set on one property."""

    def __init__(self, setting: str, property_name: str, existing_setting: str, **kwargs):
        context = kwargs.get('context', {})
        context['property'] = property_name
        context['setting'] = setting
        context['existing_setting'] = existing_setting

        super().__init__(
            f"Both {setting} and {existing_setting} have been set on property "
            f"'{property_name}'. Configure only one of these.",
            context=context,
            suggestions=kwargs.get('suggestions') or [
                f"Clear {existing_setting} before setting {setting}",
                "Use the fluent builder, which replaces the previous setting"
            ],
            error_code="CONFLICTING_VALUE_GENERATION"
        )


class IncorrectDefaultValueTypeError(ModelBuilderError, TypeError):
    """Raised when a default value does not match the property type."""

    def __init__(self, value: Any, property_name: str, property_type: type, **kwargs):
        context = kwargs.get('context', {})
        context['property'] = property_name
        context['property_type'] = getattr(property_type, '__name__', str(property_type))
        context['value_type'] = type(value).__name__

        super().__init__(
            f"Cannot set default value {value!r} of type "
            f"'{type(value).__name__}' on property '{property_name}' of type "
            f"'{context['property_type']}'.",
            context=context,
            error_code="INCORRECT_DEFAULT_VALUE_TYPE"
        )


class InvalidValueGenerationError(ModelBuilderError, ValueError):
    """Raised when a value generation strategy is not supported by a property type."""

    def __init__(self, strategy: Any, property_name: str, property_type: type, **kwargs):
        context = kwargs.get('context', {})
        context['property'] = property_name
        context['strategy'] = getattr(strategy, 'value', strategy)
        context['property_type'] = getattr(property_type, '__name__', str(property_type))

        super().__init__(
            f"Value generation strategy '{context['strategy']}' cannot be used for "
            f"property '{property_name}' of type '{context['property_type']}'.",
            context=context,
            suggestions=kwargs.get('suggestions') or [
                "Identity columns require an int or Decimal property",
                "Hi-lo sequences require an int property"
            ],
            error_code="INVALID_VALUE_GENERATION"
        )


class ModelDefinitionError(ModelBuilderError):
    """Raised when the model shape itself is inconsistent."""

    def __init__(self, message: str, entity: str = None, member: str = None, **kwargs):
        context = kwargs.get('context', {})
        if entity:
            context['entity'] = entity
        if member:
            context['member'] = member

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check the entity class type hints",
                "Declare the property explicitly with its Python type",
                "Check relationship navigation names"
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="MODEL_DEFINITION_ERROR"
        )


class MissingMetadataError(ModelDefinitionError):
    """Raised when a referenced entity type, property or navigation does not exist."""

    def __init__(self, kind: str, name: str, entity: str = None, **kwargs):
        super().__init__(
            f"The {kind} '{name}' was not found"
            + (f" on entity type '{entity}'." if entity else "."),
            entity=entity,
            member=name,
            **kwargs
        )
        self.kind = kind
