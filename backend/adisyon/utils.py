from enum import Enum


def parse_enum(enum_cls, raw_value, field_name):
    if raw_value is None:
        raise ValueError(f"{field_name} is required")
    try:
        return enum_cls(raw_value)
    except ValueError as exc:
        valid = ", ".join([e.value for e in enum_cls])
        raise ValueError(f"invalid {field_name} {raw_value!r}. Allowed values: {valid}") from exc


def enum_value(value):
    if isinstance(value, Enum):
        return value.value
    return value
