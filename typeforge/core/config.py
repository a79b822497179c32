# core/config.py
"""
typeforge Configuration Management

Handles loading, validation and defaults for typeforge.config.json. The result
is a flat, immutable GeneratorOptions record that is read by the template
engine and the generator for the whole run.
"""

import json
from pathlib import Path
from dataclasses import dataclass, fields, replace
from typing import Dict, Any, Optional, Tuple

from typeforge.core.errors import ConfigurationError
from typeforge.core.converters import ConverterChain, CONVERTERS


__version__ = "0.3.1"

CONFIG_FILE_NAME = "typeforge.config.json"


def get_version() -> str:
    return __version__


@dataclass(frozen=True)
class GeneratorOptions:
    """Complete generator configuration for one run."""
    tab_length: int = 2
    single_quotes: bool = True
    const_enums: bool = False
    output_directory: str = "."
    file_extension: str = "ts"
    file_name_converters: Tuple[str, ...] = ("pascal_case_to_kebab_case",)
    type_name_converters: Tuple[str, ...] = ()
    property_name_converters: Tuple[str, ...] = ()
    enum_value_name_converters: Tuple[str, ...] = ()
    create_index_file: bool = False
    index_file_name: str = "index"
    add_file_header: bool = True
    generate_dependencies: bool = True
    max_workers: Optional[int] = None

    def __post_init__(self):
        """Reject values the generator cannot work with."""
        if not isinstance(self.tab_length, int) or isinstance(self.tab_length, bool) or self.tab_length < 0:
            raise ConfigurationError(f"tabLength must be an integer >= 0, got {self.tab_length!r}")
        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigurationError(f"maxWorkers must be >= 1, got {self.max_workers!r}")
        if not self.file_extension or self.file_extension.startswith("."):
            raise ConfigurationError(f"fileExtension must be non-empty and without a leading dot, got {self.file_extension!r}")
        for chain_name in ("file_name_converters", "type_name_converters",
                           "property_name_converters", "enum_value_name_converters"):
            for converter_name in getattr(self, chain_name):
                if converter_name not in CONVERTERS:
                    raise ConfigurationError(f"Unknown name converter '{converter_name}' in {chain_name}")

    @property
    def quote(self) -> str:
        return "'" if self.single_quotes else '"'

    def converter_chain(self, chain_name: str) -> ConverterChain:
        """Build the ConverterChain for one of the *_converters settings."""
        return ConverterChain.from_names(getattr(self, chain_name))

    def with_overrides(self, **overrides) -> 'GeneratorOptions':
        """Copy with keyword overrides applied; None values are ignored."""
        valid = {f.name for f in fields(self)}
        unknown = set(overrides) - valid
        if unknown:
            raise ConfigurationError(f"Unknown generator option(s): {', '.join(sorted(unknown))}")
        applied = {k: v for k, v in overrides.items() if v is not None}
        for key in ("file_name_converters", "type_name_converters",
                    "property_name_converters", "enum_value_name_converters"):
            if key in applied:
                applied[key] = tuple(applied[key])
        return replace(self, **applied)


# JSON key -> GeneratorOptions attribute
_CONFIG_KEYS = {
    "tabLength": "tab_length",
    "singleQuotes": "single_quotes",
    "constEnums": "const_enums",
    "outputDirectory": "output_directory",
    "fileExtension": "file_extension",
    "fileNameConverters": "file_name_converters",
    "typeNameConverters": "type_name_converters",
    "propertyNameConverters": "property_name_converters",
    "enumValueNameConverters": "enum_value_name_converters",
    "createIndexFile": "create_index_file",
    "indexFileName": "index_file_name",
    "addFileHeader": "add_file_header",
    "generateDependencies": "generate_dependencies",
    "maxWorkers": "max_workers",
}


def load_typeforge_config(project_root: Optional[str] = None) -> GeneratorOptions:
    """
    Load typeforge configuration from typeforge.config.json or use defaults.

    Args:
        project_root: Project root directory (defaults to current directory)

    Returns:
        GeneratorOptions with loaded or default configuration. A relative
        outputDirectory is resolved against the project root.

    Raises:
        ConfigurationError: If the file is not valid JSON or holds invalid values
    """
    if project_root is None:
        project_root = str(Path.cwd())

    config_path = Path(project_root) / CONFIG_FILE_NAME

    if config_path.exists():
        options = _load_config_from_file(config_path)
    else:
        options = GeneratorOptions()

    output_dir = Path(options.output_directory)
    if not output_dir.is_absolute():
        options = replace(options, output_directory=str(Path(project_root) / output_dir))
    return options


def _load_config_from_file(config_path: Path) -> GeneratorOptions:
    """Load configuration from existing file."""
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Failed to read config from {config_path}: {e}") from e

    return _validate_and_convert_config(config_data)


def _validate_and_convert_config(config_data: Dict[str, Any]) -> GeneratorOptions:
    """Validate and convert raw config data to a GeneratorOptions object."""
    if not isinstance(config_data, dict):
        raise ConfigurationError("Config root must be a JSON object")

    unknown = set(config_data) - set(_CONFIG_KEYS)
    if unknown:
        raise ConfigurationError(f"Unknown config key(s): {', '.join(sorted(unknown))}")

    values = {}
    for json_key, attribute in _CONFIG_KEYS.items():
        if json_key not in config_data:
            continue
        value = config_data[json_key]
        if attribute.endswith("_converters"):
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, list):
                raise ConfigurationError(f"{json_key} must be a list of converter names")
            value = tuple(value)
        elif attribute in ("single_quotes", "const_enums", "create_index_file",
                           "add_file_header", "generate_dependencies"):
            if not isinstance(value, bool):
                raise ConfigurationError(f"{json_key} must be true or false")
        values[attribute] = value

    return GeneratorOptions(**values)


def options_to_dict(options: GeneratorOptions) -> Dict[str, Any]:
    """Convert GeneratorOptions to a dictionary for JSON serialization."""
    config_dict = {}
    for json_key, attribute in _CONFIG_KEYS.items():
        value = getattr(options, attribute)
        if isinstance(value, tuple):
            value = list(value)
        config_dict[json_key] = value
    return config_dict


def save_typeforge_config(options: GeneratorOptions, project_root: str) -> Path:
    """Save configuration to typeforge.config.json in the project root."""
    config_path = Path(project_root) / CONFIG_FILE_NAME
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(options_to_dict(options), f, indent=2, ensure_ascii=False)
        f.write("\n")

    return config_path
