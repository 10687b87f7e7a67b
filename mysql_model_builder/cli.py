import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from mysql_model_builder.colored_logging import (
    log_highlight,
    log_progress,
    log_section,
    log_success,
    setup_colored_logging,
)
from mysql_model_builder.config_validation import load_config
from mysql_model_builder.exceptions import ModelBuilderError
from mysql_model_builder.model_definition import (
    build_model_from_definition,
    describe_model,
    load_model_definition,
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mysql-model-builder",
        description="Build a relational model with MySQL metadata from a YAML model definition.",
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Path to the YAML settings file.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose DEBUG logging.",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output (useful for CI/CD environments).",
    )
    parser.add_argument(
        "--default-schema",
        help="Schema for tables that do not configure one. Overrides config file setting.",
    )
    parser.add_argument(
        "--pluralize-table-names",
        action="store_true",
        default=None,
        help="Use the plural of the entity name as the conventional table name.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    describe = subparsers.add_parser(
        "describe", help="Print the resolved relational and MySQL metadata as YAML."
    )
    describe.add_argument("model", help="Path to the YAML model definition.")
    describe.add_argument("-o", "--output", help="Write the description to this file instead of stdout.")

    validate = subparsers.add_parser("validate", help="Check that a model definition builds.")
    validate.add_argument("model", help="Path to the YAML model definition.")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # --- Logging Setup ---
    setup_colored_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        use_colors=not args.no_color,
    )
    if args.verbose:
        logger.debug("Verbose mode enabled. DEBUG level logging activated.")

    try:
        log_progress(logger, "Loading configuration...")
        settings = load_config(
            args.config,
            overrides={
                "default_schema": args.default_schema,
                "pluralize_table_names": args.pluralize_table_names,
            },
        )
        log_success(logger, "Configuration loaded and validated successfully.")
        logger.debug(f"Effective settings: {settings.model_dump()}")

        log_section(logger, "Model Definition")
        log_progress(logger, f"Loading model definition from {args.model}...")
        definition = load_model_definition(args.model)
        model = build_model_from_definition(definition, settings)
        log_success(logger, f"Model built with {len(model.get_entity_types())} entity types.")

        if args.command == "describe":
            document = yaml.safe_dump(describe_model(model), sort_keys=False)
            if args.output:
                Path(args.output).write_text(document, encoding="utf-8")
                log_success(logger, f"Model description written to {args.output}")
            else:
                sys.stdout.write(document)
        else:
            for entity_type in model.get_entity_types():
                mysql = entity_type.mysql()
                table = f"{mysql.schema}.{mysql.table_name}" if mysql.schema else mysql.table_name
                log_highlight(logger, f"{entity_type.name} -> {table}")
            log_success(logger, "Model definition is valid.")

    except ModelBuilderError as e:
        logger.error(f"{type(e).__name__}: {e}", exc_info=args.verbose)
        return 1
    except OSError as e:
        logger.error(f"File Error: {e}", exc_info=args.verbose)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
