"""
typeforge Template Service

A small named-template store with single-pass "$tg{tag}" substitution. The
template table is built once and never mutated; the two special tags $tg{tab}
and $tg{quot} are resolved from GeneratorOptions, everything else comes from
the caller.
"""

import re
from types import MappingProxyType
from typing import Mapping, Optional

from typeforge.core.config import GeneratorOptions
from typeforge.core.utils import get_tab_text


TAG_PATTERN = re.compile(r"\$tg\{(\w+)\}")


def _load_templates() -> Mapping[str, str]:
    templates = {
        "class": (
            "$tg{imports}$tg{customHead}export class $tg{name}$tg{extends} {"
            "$tg{properties}$tg{customBody}\n}\n"
        ),
        "class_property": "\n$tg{tab}$tg{accessor} $tg{name}: $tg{type};",
        "class_property_with_default": "\n$tg{tab}$tg{accessor} $tg{name}: $tg{type} = $tg{defaultValue};",
        "interface": (
            "$tg{imports}$tg{customHead}export interface $tg{name}$tg{extends} {"
            "$tg{properties}$tg{customBody}\n}\n"
        ),
        "interface_property": "\n$tg{tab}$tg{name}$tg{modifier}: $tg{type};",
        "enum": "$tg{imports}export$tg{modifiers} enum $tg{name} {$tg{values}\n}\n",
        "enum_value": "\n$tg{tab}$tg{name} = $tg{value},",
        "import": "import { $tg{name}$tg{aliasText} } from $tg{quot}$tg{path}$tg{quot};\n",
        "index": "$tg{exports}",
        "index_export": "export * from $tg{quot}./$tg{filename}$tg{quot};\n",
    }
    return MappingProxyType(templates)


TEMPLATES = _load_templates()


class TemplateService:
    """
    Fills named templates. Holds no per-call state, so one instance can be
    shared by all generation workers.
    """

    def __init__(self, options: GeneratorOptions, templates: Mapping[str, str] = TEMPLATES):
        self._templates = templates
        self._special_tags = MappingProxyType({
            "tab": get_tab_text(options.tab_length),
            "quot": options.quote,
        })
        self._const_enums = options.const_enums

    def fill(self, template_id: str, **values: str) -> str:
        """
        Substitute every tag of a template in one pass.

        Substituted values are never scanned again, so text that happens to
        contain "$tg{...}" is emitted verbatim.

        Raises:
            KeyError: unknown template or a tag with no value
        """
        template = self._templates[template_id]

        def substitute(match) -> str:
            tag = match.group(1)
            if tag in self._special_tags:
                return self._special_tags[tag]
            if tag not in values:
                raise KeyError(f"Template '{template_id}' needs a value for tag '{tag}'")
            return values[tag]

        return TAG_PATTERN.sub(substitute, template)

    # === SHAPES === #

    def fill_class(self, imports: str, name: str, extends: str, properties: str,
                   custom_head: str, custom_body: str) -> str:
        return self.fill(
            "class", imports=imports, name=name, extends=extends,
            properties=properties, customHead=custom_head, customBody=custom_body,
        )

    def fill_class_property(self, name: str, type_name: str, default_value: Optional[str] = None,
                            accessor: str = "public") -> str:
        if default_value is None:
            return self.fill("class_property", accessor=accessor, name=name, type=type_name)
        return self.fill(
            "class_property_with_default",
            accessor=accessor, name=name, type=type_name, defaultValue=default_value,
        )

    def fill_interface(self, imports: str, name: str, extends: str, properties: str,
                       custom_head: str, custom_body: str) -> str:
        return self.fill(
            "interface", imports=imports, name=name, extends=extends,
            properties=properties, customHead=custom_head, customBody=custom_body,
        )

    def fill_interface_property(self, name: str, type_name: str, is_optional: bool) -> str:
        return self.fill("interface_property", name=name, type=type_name, modifier="?" if is_optional else "")

    def fill_enum(self, imports: str, name: str, values: str, is_const: bool = False) -> str:
        modifiers = " const" if (is_const or self._const_enums) else ""
        return self.fill("enum", imports=imports, name=name, values=values, modifiers=modifiers)

    def fill_enum_value(self, name: str, value: str) -> str:
        return self.fill("enum_value", name=name, value=value)

    def fill_import(self, name: str, path: str, type_alias: Optional[str] = None) -> str:
        alias_text = f" as {type_alias}" if type_alias else ""
        return self.fill("import", name=name, aliasText=alias_text, path=path)

    def fill_index(self, exports: str) -> str:
        return self.fill("index", exports=exports)

    def fill_index_export(self, filename: str) -> str:
        return self.fill("index_export", filename=filename)

    def get_extends_text(self, name: Optional[str]) -> str:
        return f" extends {name}" if name else ""

    @property
    def quote(self) -> str:
        return self._special_tags["quot"]