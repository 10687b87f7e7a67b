# File: tests/conftest.py
# Contains pytest fixtures shared by the model builder tests.

from pathlib import Path
from typing import Any, Callable, Dict

import pytest
import yaml

from mysql_model_builder.builders import MySqlModelBuilder
from mysql_model_builder.config_validation import ModelBuilderSettings


@pytest.fixture
def model_builder() -> MySqlModelBuilder:
    """A MySQL model builder with default settings."""
    return MySqlModelBuilder()


@pytest.fixture
def settings() -> ModelBuilderSettings:
    return ModelBuilderSettings()


@pytest.fixture
def write_yaml(tmp_path: Path) -> Callable[[str, Dict[str, Any]], Path]:
    """Write a mapping to a YAML file under a temporary directory and return its path."""

    def _write(name: str, data: Dict[str, Any]) -> Path:
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def shop_definition() -> Dict[str, Any]:
    """A model definition with two related entities and a hi-lo sequence."""
    return {
        "default_schema": "shop",
        "value_generation": {"strategy": "sequence_hi_lo", "sequence_name": "shop_hilo"},
        "sequences": [
            {"name": "invoice_numbers", "type": "int32", "start_value": 1000, "increment_by": 5},
        ],
        "entities": [
            {
                "name": "Customer",
                "properties": [
                    {"name": "id", "type": "int"},
                    {"name": "name", "type": "str", "column_name": "customer_name"},
                    {"name": "created", "type": "datetime", "default_value_sql": "CURRENT_TIMESTAMP"},
                ],
                "indexes": [{"properties": ["name"], "unique": True, "name": "IX_customer_name"}],
            },
            {
                "name": "Order",
                "table": "orders",
                "properties": [
                    {"name": "order_id", "type": "int"},
                    {"name": "customer_id", "type": "int"},
                    {"name": "total", "type": "decimal", "default_value": "0.00"},
                ],
                "relationships": [
                    {
                        "principal": "Customer",
                        "foreign_key": ["customer_id"],
                        "navigation": "customer",
                        "inverse_navigation": "orders",
                        "constraint_name": "FK_orders_customers",
                    },
                ],
            },
        ],
    }
