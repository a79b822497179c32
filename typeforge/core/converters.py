"""
Name converters

Converters turn a type, file, property or enum value name into a new name.
They are chained in configuration order; each converter receives the output of
the previous one together with the descriptor the name belongs to (or None).
"""

import re
from typing import Any, Callable, Dict, Iterable, Optional, Tuple


NameConverter = Callable[[str, Optional[Any]], str]


def _split_words(name: str) -> list:
    spaced = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", name)
    spaced = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1 \2", spaced)
    return [word for word in re.split(r"[\s_\-]+", spaced) if word]


def pascal_case_to_camel_case(name: str, descriptor: Optional[Any] = None) -> str:
    if not name:
        return name
    return name[0].lower() + name[1:]


def camel_case_to_pascal_case(name: str, descriptor: Optional[Any] = None) -> str:
    if not name:
        return name
    return name[0].upper() + name[1:]


def pascal_case_to_kebab_case(name: str, descriptor: Optional[Any] = None) -> str:
    """UserProfile -> user-profile"""
    return "-".join(word.lower() for word in _split_words(name))


def pascal_case_to_underscore_case(name: str, descriptor: Optional[Any] = None) -> str:
    """UserProfile -> user_profile"""
    return "_".join(word.lower() for word in _split_words(name))


def underscore_case_to_pascal_case(name: str, descriptor: Optional[Any] = None) -> str:
    """user_profile / USER_PROFILE -> UserProfile"""
    return "".join(word[:1].upper() + word[1:].lower() for word in name.split("_") if word)


def underscore_case_to_camel_case(name: str, descriptor: Optional[Any] = None) -> str:
    """user_profile -> userProfile"""
    return pascal_case_to_camel_case(underscore_case_to_pascal_case(name))


def identity(name: str, descriptor: Optional[Any] = None) -> str:
    return name


CONVERTERS: Dict[str, NameConverter] = {
    "pascal_case_to_camel_case": pascal_case_to_camel_case,
    "camel_case_to_pascal_case": camel_case_to_pascal_case,
    "pascal_case_to_kebab_case": pascal_case_to_kebab_case,
    "pascal_case_to_underscore_case": pascal_case_to_underscore_case,
    "underscore_case_to_pascal_case": underscore_case_to_pascal_case,
    "underscore_case_to_camel_case": underscore_case_to_camel_case,
    "identity": identity,
}


def get_converter(name: str) -> NameConverter:
    """Look up a built-in converter by its configuration name."""
    try:
        return CONVERTERS[name]
    except KeyError:
        valid = ", ".join(sorted(CONVERTERS))
        raise ValueError(f"Unknown name converter '{name}'. Available: {valid}") from None


class ConverterChain:
    """Ordered, immutable collection of name converters."""

    def __init__(self, converters: Iterable[NameConverter] = ()):
        self._converters: Tuple[NameConverter, ...] = tuple(converters)

    @classmethod
    def from_names(cls, names: Iterable[str]) -> 'ConverterChain':
        return cls(get_converter(name) for name in names)

    def __len__(self) -> int:
        return len(self._converters)

    def convert(self, name: str, descriptor: Optional[Any] = None) -> str:
        for converter in self._converters:
            name = converter(name, descriptor)
        return name
