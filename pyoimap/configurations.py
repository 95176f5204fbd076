from __future__ import annotations

import fnmatch
from dataclasses import Field, dataclass, field
from typing import Any, ClassVar, Literal, TypeVar, dataclass_transform

from pyoimap.errors import ConfigurationError


@dataclass
class ConfigurationFieldData:
    type_: Literal["integer", "float"] = "integer"
    alias: str | None = None
    minimum: float | None = None
    _name: str | None = None
    _field_name: str | None = None

    @property
    def name(self) -> str:
        if self._name is None:
            raise ValueError()
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = value

    @property
    def field_name(self) -> str:
        if self._field_name is None:
            raise ValueError()
        return self._field_name

    @field_name.setter
    def field_name(self, value: str) -> None:
        self._field_name = value

    def parse(self, value: str) -> int | float:
        try:
            if self.type_ == "integer":
                return int(value)
            return float(value)
        except ValueError:
            raise ConfigurationError(f"argument of '{self.name}' must be of type {self.type_}") from None

    def validate(self, value: int | float) -> None:
        if self.minimum is not None and not value >= self.minimum:
            raise ConfigurationError(f"'{self.name}' must be at least {self.minimum}, got {value}")


def configuration(
    default: int | float,
    type_: Literal["integer", "float"] = "integer",
    alias: str | None = None,
    minimum: float | None = None,
) -> Any:  # noqa:ANN401
    return field(
        default=default,
        metadata={
            "configuration": ConfigurationFieldData(type_, alias, minimum=minimum),
        },
    )


@dataclass_transform()
@dataclass
class ConfigurationBase:
    FIELD_BY_NAME: ClassVar[dict[str, ConfigurationFieldData]] = {}
    CONFIGURATIONS_NAMES: ClassVar[list[str]] = []


ConfigurationType = TypeVar("ConfigurationType", bound=ConfigurationBase)


def configurations(cls: type[ConfigurationType]) -> type[ConfigurationType]:
    for name, f in cls.__dict__.items():
        if not isinstance(f, Field):
            continue

        configuration_field_data = f.metadata.get("configuration")
        if configuration_field_data is None:
            continue

        configuration_field_data.field_name = name

        try:
            configuration_field_data.name
        except ValueError:
            configuration_field_data.name = name.replace("_", "-")

        cls.FIELD_BY_NAME[configuration_field_data.name] = configuration_field_data
        cls.CONFIGURATIONS_NAMES.append(configuration_field_data.name)

        if configuration_field_data.alias is not None:
            cls.CONFIGURATIONS_NAMES.append(configuration_field_data.alias)
            if configuration_field_data.alias in cls.FIELD_BY_NAME:
                raise ValueError(f"only one alias ({configuration_field_data.alias}) allowed per configuration")
            cls.FIELD_BY_NAME[configuration_field_data.alias] = configuration_field_data
    return dataclass(cls)


@configurations
class Configurations(ConfigurationBase):
    """Tuning knobs of the hashed key index."""

    initial_bucket_count: int = configuration(default=8, type_="integer", alias="bucket-count", minimum=1)
    max_load_factor: float = configuration(default=1.0, type_="float", minimum=0.0625)
    growth_factor: int = configuration(default=2, type_="integer", minimum=2)

    def __post_init__(self) -> None:
        for name in self.CONFIGURATIONS_NAMES:
            f = self.FIELD_BY_NAME[name]
            f.validate(getattr(self, f.field_name))

    @classmethod
    def get_field_name(cls, name: str) -> str:
        if name not in cls.FIELD_BY_NAME:
            raise ConfigurationError(f"unknown configuration '{name}'")
        return cls.FIELD_BY_NAME[name].field_name

    def set_value(self, name: str, value: str) -> None:
        field_name = self.get_field_name(name)
        f = self.FIELD_BY_NAME[name]

        parsed = f.parse(value)
        f.validate(parsed)
        setattr(self, field_name, parsed)

    def get_names(self, *patterns: str) -> set[str]:
        names: set[str] = set([])
        for pattern in patterns:
            names.update(set(fnmatch.filter(self.CONFIGURATIONS_NAMES, pattern)))
        return names

    def info(self, names: set[str]) -> dict[str, int | float]:
        info = {}
        for name in names:
            if name not in self.FIELD_BY_NAME:
                continue
            f = self.FIELD_BY_NAME[name]
            info[name] = getattr(self, f.field_name)
        return info
