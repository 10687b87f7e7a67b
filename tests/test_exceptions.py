"""
Tests for the exception hierarchy
"""

from unittest import TestCase

from mysql_model_builder.exceptions import (
    ConfigurationError,
    ConflictingValueGenerationError,
    IncorrectDefaultValueTypeError,
    InvalidNameError,
    InvalidValueGenerationError,
    MissingMetadataError,
    ModelBuilderError,
    ModelDefinitionError,
)


class TestModelBuilderError(TestCase):
    """Test cases for the base exception"""

    def test_str_includes_context_and_suggestions(self):
        error = ModelBuilderError(
            "Something failed",
            context={'entity': "Customer"},
            suggestions=["Try again"],
            error_code="TEST",
        )

        text = str(error)
        assert text.splitlines()[0] == "Something failed"
        assert "Error Code: TEST" in text
        assert "  entity: Customer" in text
        assert "  • Try again" in text

    def test_plain_message(self):
        assert str(ModelBuilderError("Plain")) == "Plain"


class TestSpecificErrors(TestCase):
    """Test cases for the context each error carries"""

    def test_configuration_error(self):
        error = ConfigurationError("Bad settings", config_file="settings.yaml")

        assert isinstance(error, ModelBuilderError)
        assert error.error_code == "CONFIG_ERROR"
        assert error.context == {'config_file': "settings.yaml"}
        assert error.suggestions

    def test_conflicting_value_generation(self):
        error = ConflictingValueGenerationError("default_value_sql", "name", "default_value")

        assert error.message == (
            "Both default_value_sql and default_value have been set on property 'name'. "
            "Configure only one of these."
        )
        assert error.error_code == "CONFLICTING_VALUE_GENERATION"

    def test_incorrect_default_value_type(self):
        error = IncorrectDefaultValueTypeError("one", "id", int)

        assert isinstance(error, TypeError)
        assert error.context == {'property': "id", 'property_type': "int", 'value_type': "str"}

    def test_invalid_name(self):
        error = InvalidNameError("schema", "")

        assert isinstance(error, ValueError)
        assert error.message == "The string argument 'schema' cannot be empty."
        assert error.context['value'] == "''"

    def test_invalid_value_generation(self):
        error = InvalidValueGenerationError("sequence_hi_lo", "total", float)

        assert isinstance(error, ValueError)
        assert error.context['strategy'] == "sequence_hi_lo"
        assert error.context['property_type'] == "float"

    def test_missing_metadata(self):
        error = MissingMetadataError("property", "email", entity="Customer")

        assert isinstance(error, ModelDefinitionError)
        assert error.message == "The property 'email' was not found on entity type 'Customer'."
        assert error.context == {'entity': "Customer", 'member': "email"}
        assert error.kind == "property"
