"""
Tests that the package and all of its modules import cleanly
"""

import importlib
from unittest import TestCase

import mysql_model_builder
from mysql_model_builder.builders import MySqlModelBuilder

from .entities import Customer

MODULES = [
    "mysql_model_builder.constants",
    "mysql_model_builder.exceptions",
    "mysql_model_builder.colored_logging",
    "mysql_model_builder.config_validation",
    "mysql_model_builder.domain.annotations",
    "mysql_model_builder.domain.naming",
    "mysql_model_builder.domain.models",
    "mysql_model_builder.domain.conventions",
    "mysql_model_builder.metadata.relational",
    "mysql_model_builder.metadata.mysql",
    "mysql_model_builder.builders.model_builder",
    "mysql_model_builder.builders.mysql",
    "mysql_model_builder.model_definition",
    "mysql_model_builder.cli",
]


class TestPackageImports(TestCase):
    """Test cases for importing the public API"""

    def test_every_module_imports(self):
        for name in MODULES:
            assert importlib.import_module(name).__name__ == name

    def test_public_names_are_exported(self):
        for name in ("ModelBuilder", "MySqlModelBuilder", "ModelBuilderSettings", "describe_model"):
            assert hasattr(mysql_model_builder, name)

    def test_property_accessor_exposes_its_property(self):
        builder = MySqlModelBuilder()
        builder.entity(Customer)

        prop = builder.model.find_entity_type(Customer).find_property("name")
        assert prop.relational().prop is prop
        assert prop.mysql().prop is prop
        assert prop.mysql().column_name == "name"
