"""
Tests for the relational() and mysql() accessors on metadata objects

Unlike the fluent builders these accessors raise when a setting conflicts
with what is already configured.
"""

from decimal import Decimal
from unittest import TestCase

import pytest

from mysql_model_builder.builders import MySqlModelBuilder
from mysql_model_builder.config_validation import ModelBuilderSettings
from mysql_model_builder.constants import (
    MySqlAnnotationNames,
    MySqlValueGenerationStrategy,
    RelationalAnnotationNames,
    SequenceValueType,
    ValueGenerated,
)
from mysql_model_builder.domain.models import Sequence
from mysql_model_builder.exceptions import (
    ConflictingValueGenerationError,
    IncorrectDefaultValueTypeError,
    InvalidValueGenerationError,
    ModelDefinitionError,
)

from .entities import Customer, Invoice, Order, OrderDetails


def _property(builder, entity, name):
    return builder.model.find_entity_type(entity).find_property(name)


class TestPropertyAccessorConflicts(TestCase):
    """Test cases for conflicting server-generated values set directly"""

    def setUp(self):
        self.builder = MySqlModelBuilder()
        self.builder.entity(Customer)

    def test_relational_default_sql_conflicts_with_default_value(self):
        prop = _property(self.builder, Customer, "name")
        prop.relational().default_value = "Neil"

        with pytest.raises(ConflictingValueGenerationError) as exc_info:
            prop.relational().default_value_sql = "UUID()"

        assert exc_info.value.context['property'] == "name"
        assert exc_info.value.context['existing_setting'] == "default_value"
        assert prop.relational().default_value == "Neil"

    def test_mysql_computed_sql_conflicts_with_mysql_default_sql(self):
        prop = _property(self.builder, Customer, "name")
        prop.mysql().default_value_sql = "UUID()"

        with pytest.raises(ConflictingValueGenerationError):
            prop.mysql().computed_column_sql = "CONCAT('a', 'b')"

    def test_mysql_default_value_conflicts_with_strategy(self):
        prop = _property(self.builder, Customer, "id")
        prop.mysql().value_generation_strategy = MySqlValueGenerationStrategy.IDENTITY_COLUMN

        with pytest.raises(ConflictingValueGenerationError) as exc_info:
            prop.mysql().default_value = 1

        assert exc_info.value.context['existing_setting'] == "value_generation_strategy"

    def test_strategy_conflicts_with_default_value(self):
        prop = _property(self.builder, Customer, "id")
        prop.relational().default_value = 1

        with pytest.raises(ConflictingValueGenerationError):
            prop.mysql().value_generation_strategy = MySqlValueGenerationStrategy.SEQUENCE_HI_LO

    def test_setting_the_same_value_again_is_allowed(self):
        prop = _property(self.builder, Customer, "name")
        prop.relational().default_value_sql = "UUID()"

        assert prop.relational().set_default_value_sql("UUID()")
        assert prop.relational().default_value_sql == "UUID()"

    def test_clearing_a_value_never_conflicts(self):
        prop = _property(self.builder, Customer, "name")
        prop.relational().computed_column_sql = "UPPER(name)"

        prop.relational().default_value = None
        prop.relational().computed_column_sql = None

        assert prop.relational().computed_column_sql is None
        assert prop.value_generated == ValueGenerated.NEVER


class TestValueGenerationStrategy(TestCase):
    """Test cases for strategy compatibility and fallback to the model"""

    def setUp(self):
        self.builder = MySqlModelBuilder()
        self.builder.entity(Customer)
        self.builder.entity(Invoice)

    def test_identity_requires_numeric_property(self):
        prop = _property(self.builder, Customer, "name")

        with pytest.raises(InvalidValueGenerationError) as exc_info:
            prop.mysql().value_generation_strategy = MySqlValueGenerationStrategy.IDENTITY_COLUMN

        assert exc_info.value.context['property_type'] == "str"

    def test_hi_lo_requires_integer_property(self):
        prop = _property(self.builder, Invoice, "total")

        with pytest.raises(InvalidValueGenerationError):
            prop.mysql().value_generation_strategy = MySqlValueGenerationStrategy.SEQUENCE_HI_LO

    def test_builder_also_rejects_incompatible_strategy(self):
        with pytest.raises(InvalidValueGenerationError):
            self.builder.entity(Invoice).property("paid").use_mysql_identity_column()

    def test_identity_on_decimal_property(self):
        prop = _property(self.builder, Invoice, "total")

        prop.mysql().value_generation_strategy = MySqlValueGenerationStrategy.IDENTITY_COLUMN

        assert prop.mysql().value_generation_strategy == MySqlValueGenerationStrategy.IDENTITY_COLUMN
        assert prop.value_generated == ValueGenerated.ON_ADD

    def test_model_strategy_only_applies_to_generated_properties(self):
        assert _property(self.builder, Customer, "id").mysql().value_generation_strategy == (
            MySqlValueGenerationStrategy.IDENTITY_COLUMN
        )
        assert _property(self.builder, Customer, "name").mysql().value_generation_strategy is None
        assert _property(self.builder, Invoice, "total").mysql().value_generation_strategy is None

    def test_model_hi_lo_skips_decimal_properties(self):
        self.builder.entity(Invoice).property("total").value_generated_on_add()
        self.builder.for_mysql_use_sequence_hi_lo()

        assert _property(self.builder, Invoice, "total").mysql().value_generation_strategy is None
        assert _property(self.builder, Invoice, "id").mysql().value_generation_strategy == (
            MySqlValueGenerationStrategy.SEQUENCE_HI_LO
        )

    def test_model_identity_applies_to_decimal_properties(self):
        self.builder.entity(Invoice).property("total").value_generated_on_add()

        assert _property(self.builder, Invoice, "total").mysql().value_generation_strategy == (
            MySqlValueGenerationStrategy.IDENTITY_COLUMN
        )

    def test_find_hi_lo_sequence_is_none_without_hi_lo(self):
        prop = _property(self.builder, Customer, "id")

        assert prop.mysql().find_hi_lo_sequence() is None

    def test_strategy_is_stored_as_mysql_annotation(self):
        prop = _property(self.builder, Customer, "id")
        prop.mysql().value_generation_strategy = MySqlValueGenerationStrategy.IDENTITY_COLUMN

        assert prop[MySqlAnnotationNames.VALUE_GENERATION_STRATEGY] == MySqlValueGenerationStrategy.IDENTITY_COLUMN
        assert prop.find_annotation("Relational:ValueGenerationStrategy") is None


class TestDefaultValueTypes(TestCase):
    """Test cases for default values that must match the property type"""

    def setUp(self):
        self.builder = MySqlModelBuilder()
        self.builder.entity(Invoice)

    def test_wrong_default_type_is_rejected(self):
        prop = _property(self.builder, Invoice, "id")

        with pytest.raises(IncorrectDefaultValueTypeError) as exc_info:
            prop.relational().default_value = "one"

        assert exc_info.value.context['value_type'] == "str"
        assert exc_info.value.context['property_type'] == "int"

    def test_builders_reject_wrong_default_type(self):
        with pytest.raises(IncorrectDefaultValueTypeError):
            self.builder.entity(Invoice).property("paid").has_default_value(0)
        with pytest.raises(IncorrectDefaultValueTypeError):
            self.builder.entity(Invoice).property("id").for_mysql_has_default_value(True)

    def test_decimal_accepts_int_and_decimal(self):
        builder = self.builder.entity(Invoice).property("total")

        builder.has_default_value(0)
        builder.has_default_value(Decimal("9.99"))

        assert _property(self.builder, Invoice, "total").relational().default_value == Decimal("9.99")

    def test_incorrect_default_value_error_is_type_error(self):
        with pytest.raises(TypeError):
            _property(self.builder, Invoice, "paid").mysql().default_value = "yes"


class TestNamingAccessors(TestCase):
    """Test cases for conventional and configured names"""

    def test_column_name_defaults_to_property_name(self):
        builder = MySqlModelBuilder()
        builder.entity(Customer)

        prop = _property(builder, Customer, "name")
        assert prop.relational().column_name == "name"
        assert prop.mysql().column_name == "name"

    def test_mysql_column_overrides_do_not_touch_relational(self):
        builder = MySqlModelBuilder()
        (builder.entity(Customer).property("name")
            .has_column_name("customer_name")
            .for_mysql_has_column_name("mysql_name")
            .for_mysql_has_column_type("varchar(200)"))

        prop = _property(builder, Customer, "name")
        assert prop.relational().column_name == "customer_name"
        assert prop.mysql().column_name == "mysql_name"
        assert prop.relational().column_type is None
        assert prop.mysql().column_type == "varchar(200)"
        assert prop[RelationalAnnotationNames.COLUMN_NAME] == "customer_name"
        assert prop["MySql:ColumnName"] == "mysql_name"

    def test_schema_falls_back_to_default_schema(self):
        builder = MySqlModelBuilder()
        builder.has_default_schema("shop")
        builder.entity(Customer)
        builder.entity(Order).to_table("orders", "sales")

        assert builder.model.find_entity_type(Customer).mysql().schema == "shop"
        assert builder.model.find_entity_type(Order).mysql().schema == "sales"

    def test_default_schema_from_settings(self):
        builder = MySqlModelBuilder(ModelBuilderSettings(default_schema="shop"))
        builder.entity(Customer)

        assert builder.model.relational().default_schema == "shop"
        assert builder.model.find_entity_type(Customer).relational().schema == "shop"

    def test_pluralized_table_names(self):
        builder = MySqlModelBuilder(ModelBuilderSettings(pluralize_table_names=True))
        builder.entity(Customer)
        builder.entity(OrderDetails)

        assert builder.model.find_entity_type(Customer).mysql().table_name == "Customers"
        assert builder.model.find_entity_type(OrderDetails).mysql().table_name == "OrderDetails"
        assert builder.model.find_entity_type(Customer).find_primary_key().relational().name == "PK_Customers"

    def test_conventional_index_and_alternate_key_names(self):
        builder = MySqlModelBuilder()
        builder.entity(Customer).has_index("name")
        builder.entity(Customer).has_alternate_key("name")

        entity_type = builder.model.find_entity_type(Customer)
        assert entity_type.get_indexes()[0].mysql().name == "IX_Customer_name"
        alternate = [key for key in entity_type.get_keys() if not key.is_primary_key()]
        assert [key.mysql().name for key in alternate] == ["AK_Customer_name"]

    def test_conventional_names_follow_column_overrides(self):
        builder = MySqlModelBuilder()
        builder.entity(Customer).property("name").for_mysql_has_column_name("full_name")
        builder.entity(Customer).has_index("name")

        index = builder.model.find_entity_type(Customer).get_indexes()[0]
        assert index.relational().name == "IX_Customer_name"
        assert index.mysql().name == "IX_Customer_full_name"

    def test_conventional_names_are_truncated(self):
        builder = MySqlModelBuilder(ModelBuilderSettings(max_identifier_length=10, hi_lo_sequence_name="hilo"))
        builder.entity(Customer)

        key = builder.model.find_entity_type(Customer).find_primary_key()
        assert key.mysql().name == "PK_Custom~"

    def test_clustering_is_unset_by_default(self):
        builder = MySqlModelBuilder()
        builder.entity(Customer).has_index("name")

        entity_type = builder.model.find_entity_type(Customer)
        assert entity_type.find_primary_key().mysql().is_clustered is None
        assert entity_type.get_indexes()[0].mysql().is_clustered is None
        assert entity_type.mysql().is_memory_optimized is False


class TestSequenceValidation(TestCase):
    """Test cases for sequence facets"""

    def test_value_type_determines_python_type(self):
        assert Sequence("s", value_type=SequenceValueType.INT16).clr_type is int
        assert Sequence("s", value_type=SequenceValueType.DECIMAL).clr_type is Decimal

    def test_start_value_must_fit_value_type(self):
        with pytest.raises(ModelDefinitionError):
            Sequence("s", value_type=SequenceValueType.UINT8, start_value=300).validate()

    def test_increment_cannot_be_zero(self):
        with pytest.raises(ModelDefinitionError):
            Sequence("s", increment_by=0).validate()

    def test_min_cannot_exceed_max(self):
        with pytest.raises(ModelDefinitionError):
            Sequence("s", min_value=10, max_value=1).validate()

    def test_valid_sequence(self):
        sequence = Sequence("s", "dbo", SequenceValueType.INT32, start_value=5, min_value=1, max_value=100)

        sequence.validate()
        assert sequence.to_dict() == {
            'name': "s",
            'schema': "dbo",
            'type': "int32",
            'start_value': 5,
            'increment_by': 1,
            'min_value': 1,
            'max_value': 100,
            'is_cyclic': False,
        }
