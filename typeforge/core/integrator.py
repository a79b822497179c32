"""
typeforge Integration

Config-driven entry points: build the type model from exported classes, run
the TypeScript generator and write the results, preserving the custom code
regions of files generated by earlier runs.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Tuple

from typeforge.core.schema import TypeModel
from typeforge.core.config import load_typeforge_config, GeneratorOptions
from typeforge.introspection.models import build_type_model
from typeforge.generators.typescript.pipeline import (
    TypeScriptGenerator, GenerationResult, write_generated_files,
)


logger = logging.getLogger(__name__)


def integrate(
    classes: Iterable[type],
    project_root: Optional[str] = None,
    verbose: bool = False,
    write: bool = True,
    **options
) -> Tuple[TypeModel, GenerationResult]:
    """
    Generate TypeScript files for exported classes.

    Args:
        classes: Classes decorated with export_ts_class, export_ts_interface or
            export_ts_enum. Files are generated in this order.
        project_root: Project root directory (defaults to current directory).
            typeforge.config.json is read from here and it bounds the
            discovery of referenced classes.
        verbose: Enable detailed logging output
        write: Write the generated files to disk
        **options: GeneratorOptions overrides, e.g. tab_length=4 or
            output_directory="src/app/models" (override the config file)

    Returns:
        Tuple[TypeModel, GenerationResult]:
            - TypeModel: Introspection results
            - GenerationResult: Generated files and per-type configuration errors

    Examples:
        model, result = typeforge.integrate([User, Role])
        model, result = typeforge.integrate([User], tab_length=4, create_index_file=True)
        sys.exit(result.exit_code)

    Raises:
        ConfigurationError: If the config file or the overrides are invalid,
            or a class cannot be introspected

    Note:
        integrate() is idempotent - running it again over unchanged classes
        rewrites identical files.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s: %(message)s')

    project_root = _resolve_project_root(project_root)
    generator_options = _load_options(project_root, options)

    if verbose:
        logger.info("Starting typeforge integration")
        logger.debug(f"Project root: {project_root}")
        logger.debug(f"Output directory: {generator_options.output_directory}")
        logger.debug(f"Quotes: {generator_options.quote}, tab length: {generator_options.tab_length}")

    type_model = build_type_model(classes, project_root)

    if verbose:
        logger.info(f"Introspection complete: {len(type_model.exported_types())} exported, "
                    f"{len(type_model)} types in model")

    result = TypeScriptGenerator(type_model, generator_options).generate()

    if write:
        write_generated_files(result.files)

    if not verbose:
        status = "" if result.success else f", {len(result.errors)} types failed"
        suffix = "" if write else " - not written to disk"
        print(f"typeforge: Generated {len(result.files)} TypeScript files{status}{suffix}")

    return type_model, result


def _resolve_project_root(project_root: Optional[str]) -> str:
    if project_root is None:
        return str(Path.cwd().resolve())
    return str(Path(project_root).resolve())


def _load_options(project_root: str, overrides: dict) -> GeneratorOptions:
    """Config file settings with keyword overrides applied on top."""
    options = load_typeforge_config(project_root)
    options = options.with_overrides(**overrides)

    output_dir = Path(options.output_directory)
    if not output_dir.is_absolute():
        options = options.with_overrides(output_directory=str(Path(project_root) / output_dir))
    return options


# === CONVENIENCE FUNCTIONS === #

def introspect_only(classes: Iterable[type], project_root: Optional[str] = None) -> TypeModel:
    """Convenience function for introspection only (no code generation)."""
    project_root = _resolve_project_root(project_root)
    type_model = build_type_model(classes, project_root)

    print(f"typeforge: Introspected {len(type_model)} types ({len(type_model.exported_types())} exported)")
    return type_model


def generate_only(
    classes: Iterable[type],
    project_root: Optional[str] = None,
    **options
) -> GenerationResult:
    """Convenience function to generate files without writing to disk."""
    _, result = integrate(classes, project_root=project_root, write=False, **options)
    return result
