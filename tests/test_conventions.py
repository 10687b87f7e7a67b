"""
Tests for the conventions applied while a model is built
"""

from unittest import TestCase

import pytest

from mysql_model_builder.builders import EntityTypeBuilder, ModelBuilder, MySqlModelBuilder
from mysql_model_builder.config_validation import ModelBuilderSettings
from mysql_model_builder.constants import MySqlValueGenerationStrategy, ValueGenerated
from mysql_model_builder.domain.annotations import ConfigurationSource
from mysql_model_builder.domain.conventions import find_candidate_foreign_key_properties
from mysql_model_builder.exceptions import MissingMetadataError, ModelDefinitionError

from .entities import Customer, Invoice, Order, OrderDetails


class TestPropertyDiscovery(TestCase):
    """Test cases for properties discovered from type hints"""

    def test_scalar_members_become_properties(self):
        builder = MySqlModelBuilder()
        builder.entity(Customer)

        entity_type = builder.model.find_entity_type(Customer)
        assert [p.name for p in entity_type.get_properties()] == ["id", "name", "offset"]
        assert all(p.configuration_source == ConfigurationSource.CONVENTION for p in entity_type.get_properties())
        assert entity_type.find_property("orders") is None

    def test_nullability_follows_type_hints(self):
        builder = MySqlModelBuilder()
        builder.entity(Invoice)

        entity_type = builder.model.find_entity_type(Invoice)
        assert entity_type.find_property("reference").is_nullable
        assert entity_type.find_property("reference").clr_type is str
        assert not entity_type.find_property("total").is_nullable
        assert not entity_type.find_property("id").is_nullable

    def test_strings_are_nullable_by_default(self):
        builder = MySqlModelBuilder()
        builder.entity(Customer)

        assert builder.model.find_entity_type(Customer).find_property("name").is_nullable

    def test_ignored_members_are_not_discovered(self):
        builder = MySqlModelBuilder()
        builder.entity(Invoice).ignore("reference")

        assert builder.model.find_entity_type(Invoice).find_property("reference") is None

    def test_unknown_member_requires_type(self):
        builder = MySqlModelBuilder()

        with pytest.raises(ModelDefinitionError) as exc_info:
            builder.entity(Customer).property("nickname")

        assert exc_info.value.context['member'] == "nickname"

    def test_shadow_property(self):
        builder = MySqlModelBuilder()
        builder.entity(Customer).property("nickname", str).has_column_name("nick")

        prop = builder.model.find_entity_type(Customer).find_property("nickname")
        assert prop.is_shadow
        assert prop.configuration_source == ConfigurationSource.EXPLICIT
        assert prop.mysql().column_name == "nick"

    def test_property_type_must_match(self):
        builder = MySqlModelBuilder()

        with pytest.raises(ModelDefinitionError):
            builder.entity(Customer).property("name", int)

    def test_missing_metadata(self):
        builder = MySqlModelBuilder()
        builder.entity(Customer)

        with pytest.raises(MissingMetadataError) as exc_info:
            builder.model.get_entity_type("Supplier")
        assert exc_info.value.kind == "entity type"

        with pytest.raises(MissingMetadataError):
            builder.model.get_entity_type(Customer).get_property("nickname")


class TestKeyDiscovery(TestCase):
    """Test cases for primary keys found by convention"""

    def test_id_is_the_primary_key(self):
        builder = MySqlModelBuilder()
        builder.entity(Customer)

        key = builder.model.find_entity_type(Customer).find_primary_key()
        assert [p.name for p in key.properties] == ["id"]
        assert builder.model.find_entity_type(Customer).primary_key_configuration_source == (
            ConfigurationSource.CONVENTION
        )

    def test_entity_id_is_the_primary_key(self):
        builder = MySqlModelBuilder()
        builder.entity(Order)

        key = builder.model.find_entity_type(Order).find_primary_key()
        assert [p.name for p in key.properties] == ["order_id"]

    def test_explicit_key_replaces_convention(self):
        builder = MySqlModelBuilder()
        builder.entity(Invoice).has_key("reference")

        entity_type = builder.model.find_entity_type(Invoice)
        assert [p.name for p in entity_type.find_primary_key().properties] == ["reference"]
        assert entity_type.find_property("id").value_generated == ValueGenerated.NEVER
        assert not entity_type.find_property("id").is_key()

    def test_named_entity_discovers_key_from_explicit_property(self):
        builder = MySqlModelBuilder()
        builder.entity("Supplier").property("supplier_id", int)

        entity_type = builder.model.find_entity_type("Supplier")
        assert [p.name for p in entity_type.find_primary_key().properties] == ["supplier_id"]
        assert entity_type.find_property("supplier_id").value_generated == ValueGenerated.ON_ADD


class TestValueGeneratedConvention(TestCase):
    """Test cases for when values are generated by the database"""

    def test_integer_primary_key_is_generated_on_add(self):
        builder = MySqlModelBuilder()
        builder.entity(Customer)

        entity_type = builder.model.find_entity_type(Customer)
        assert entity_type.find_property("id").value_generated == ValueGenerated.ON_ADD
        assert entity_type.find_property("name").value_generated == ValueGenerated.NEVER
        assert entity_type.find_property("offset").value_generated == ValueGenerated.NEVER

    def test_foreign_key_primary_key_is_not_generated(self):
        builder = MySqlModelBuilder()
        builder.entity(Order).has_one("details").with_one("order").has_foreign_key(OrderDetails, "id")

        prop = builder.model.find_entity_type(OrderDetails).find_property("id")
        assert prop.is_foreign_key()
        assert prop.value_generated == ValueGenerated.NEVER
        assert prop.mysql().value_generation_strategy is None

    def test_explicit_value_generated_wins(self):
        builder = MySqlModelBuilder()
        builder.entity(Customer).property("id").value_generated_never()

        prop = builder.model.find_entity_type(Customer).find_property("id")
        assert prop.value_generated == ValueGenerated.NEVER
        assert prop.value_generated_configuration_source == ConfigurationSource.EXPLICIT
        assert prop.mysql().value_generation_strategy is None

    def test_removing_server_value_restores_convention(self):
        builder = MySqlModelBuilder()
        builder.entity(Customer).property("name").has_computed_column_sql("UPPER(name)")
        builder.entity(Customer).property("name").has_computed_column_sql(None)

        prop = builder.model.find_entity_type(Customer).find_property("name")
        assert prop.value_generated == ValueGenerated.NEVER

    def test_mysql_overrides_drive_value_generated(self):
        builder = MySqlModelBuilder()
        builder.entity(Customer).property("offset").for_mysql_has_computed_column_sql("NOW()")

        prop = builder.model.find_entity_type(Customer).find_property("offset")
        assert prop.value_generated == ValueGenerated.ON_ADD_OR_UPDATE
        assert prop.relational().computed_column_sql is None


class TestModelConventions(TestCase):
    """Test cases for model-wide conventions"""

    def test_mysql_builder_uses_identity_columns_by_convention(self):
        builder = MySqlModelBuilder()

        annotation = builder.model.find_annotation("MySql:ValueGenerationStrategy")
        assert annotation.value == MySqlValueGenerationStrategy.IDENTITY_COLUMN
        assert annotation.configuration_source == ConfigurationSource.CONVENTION

    def test_settings_choose_model_strategy(self):
        builder = MySqlModelBuilder(ModelBuilderSettings(
            value_generation_strategy=MySqlValueGenerationStrategy.SEQUENCE_HI_LO
        ))
        builder.entity(Customer)

        prop = builder.model.find_entity_type(Customer).find_property("id")
        assert builder.model.mysql().value_generation_strategy == MySqlValueGenerationStrategy.SEQUENCE_HI_LO
        assert prop.mysql().value_generation_strategy == MySqlValueGenerationStrategy.SEQUENCE_HI_LO

    def test_settings_can_disable_model_strategy(self):
        builder = MySqlModelBuilder(ModelBuilderSettings(value_generation_strategy=None))
        builder.entity(Customer)

        prop = builder.model.find_entity_type(Customer).find_property("id")
        assert builder.model.mysql().value_generation_strategy is None
        assert prop.value_generated == ValueGenerated.ON_ADD
        assert prop.mysql().value_generation_strategy is None

    def test_hi_lo_increment_from_settings(self):
        builder = MySqlModelBuilder(ModelBuilderSettings(hi_lo_increment=50, hi_lo_sequence_name="ids"))
        builder.for_mysql_use_sequence_hi_lo()

        sequence = builder.model.mysql().find_hi_lo_sequence()
        assert sequence.name == "ids"
        assert sequence.increment_by == 50

    def test_relational_builder_has_no_mysql_conventions(self):
        builder = ModelBuilder()
        entity_builder = builder.entity(Customer)

        assert type(entity_builder) is EntityTypeBuilder
        assert not hasattr(entity_builder, "for_mysql_to_table")
        assert builder.model.mysql().value_generation_strategy is None
        assert builder.model.find_entity_type(Customer).find_property("id").value_generated == ValueGenerated.ON_ADD

    def test_ignore_entity_type(self):
        builder = MySqlModelBuilder()
        builder.entity(Invoice)

        builder.ignore(Invoice)

        assert builder.model.find_entity_type(Invoice) is None


class TestForeignKeyDiscovery(TestCase):
    """Test cases for foreign key properties matched by name"""

    def setUp(self):
        self.builder = MySqlModelBuilder()
        self.builder.entity(Customer)
        self.builder.entity(Order)
        self.builder.entity(OrderDetails)

    def _entity(self, entity):
        return self.builder.model.find_entity_type(entity)

    def test_principal_name_and_id(self):
        customer = self._entity(Customer)

        matches = find_candidate_foreign_key_properties(
            self._entity(Order), customer, customer.find_primary_key()
        )

        assert [p.name for p in matches] == ["customer_id"]

    def test_key_already_prefixed_with_principal_name(self):
        order = self._entity(Order)

        matches = find_candidate_foreign_key_properties(
            self._entity(OrderDetails), order, order.find_primary_key(), navigation="order"
        )

        assert [p.name for p in matches] == ["order_id"]

    def test_no_match(self):
        order = self._entity(Order)

        assert find_candidate_foreign_key_properties(
            self._entity(Customer), order, order.find_primary_key()
        ) is None

    def test_relationship_uses_discovered_property(self):
        self.builder.entity(Customer).has_many("orders").with_one("customer")

        foreign_key = self._entity(Order).get_foreign_keys()[0]
        assert [p.name for p in foreign_key.properties] == ["customer_id"]
        assert foreign_key.is_required
        assert foreign_key.dependent_to_principal == "customer"
        assert foreign_key.principal_to_dependent == "orders"
        assert self._entity(Customer).find_navigation("orders") is foreign_key
