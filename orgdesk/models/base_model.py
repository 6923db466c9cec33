import logging
from uuid import uuid4
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from dateutil.parser import isoparse
from typing import Any, ClassVar, Dict, List, Tuple, Union, get_type_hints, get_origin, get_args

logger = logging.getLogger(__name__)

# Fields owned by the remote data source; never sent on insert/update.
SYSTEM_FIELDS = {'entity_id', 'created_at', 'updated_at'}


def default_datetime():
    """
    Definition for default datetime
    """
    return datetime.now(timezone.utc)


def get_uuid_hex():
    """
    Returns a random UUID in hex format.
    """
    return uuid4().hex


def _is_optional(hint) -> bool:
    return get_origin(hint) is Union and type(None) in get_args(hint)


def _accepts(hint, expected_type) -> bool:
    if hint is expected_type:
        return True
    return get_origin(hint) is Union and expected_type in get_args(hint)


class ModelValidationError(Exception):
    """
    Exception raised when one or more validation errors occur in the model.

    Attributes:
        errors (list): A list of error messages returned from validation methods.
    """

    def __init__(self, errors):
        # Ensure errors is a list of messages
        if isinstance(errors, str):
            errors = [errors]
        elif not isinstance(errors, list):
            raise ValueError("Errors should be a string or a list of strings")
        self.errors = errors
        super().__init__(self.format_errors())

    def format_errors(self):
        return "\n".join(self.errors)

    def __str__(self):
        return self.format_errors()


@dataclass(kw_only=True)
class BaseModel:
    """A base class for organization-scoped records with common attributes."""

    entity_id: str = field(default_factory=get_uuid_hex, metadata={'alias': 'id'})
    created_at: datetime = field(default_factory=default_datetime)
    updated_at: datetime = field(default_factory=default_datetime)

    # Field pairs that must be both set or both absent, e.g. occupant and assignment time.
    paired_fields: ClassVar[Tuple[Tuple[str, str], ...]] = ()

    def __repr__(self) -> str:
        field_strings = [f"{name}={getattr(self, name)!r}" for name in self.fields()]
        return f"{type(self).__name__}({', '.join(field_strings)})"

    @classmethod
    def fields(cls) -> List[str]:
        """
        Get a list of field names for this model.

        Returns:
            List[str]: A list of field names.
        """
        return [f.name for f in fields(cls)]

    @classmethod
    def writable_fields(cls) -> List[str]:
        """Field names a caller may send to the remote data source."""
        return [name for name in cls.fields() if name not in SYSTEM_FIELDS]

    @classmethod
    def _build_alias_mapping(cls) -> Dict[str, str]:
        """Build a mapping from field aliases to field names."""
        return {f.metadata['alias']: f.name for f in fields(cls) if f.metadata.get('alias')}

    @classmethod
    def _parse_datetime(cls, name: str, value: str) -> datetime:
        try:
            return isoparse(value)
        except (ValueError, TypeError) as e:
            raise ModelValidationError(f"Invalid datetime for '{name}': {value!r}") from e

    @classmethod
    def normalize(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Converts a row (remote, cached, or caller supplied) into constructor kwargs.

        Aliased keys are resolved, unknown keys dropped, empty strings and None on
        optional fields collapse to None, and ISO strings on datetime fields are parsed.
        """
        alias_to_field = cls._build_alias_mapping()
        converted = {alias_to_field.get(k, k): v for k, v in data.items()}
        clean_data = {k: v for k, v in converted.items() if k in cls.fields()}
        hints = get_type_hints(cls)

        for k, v in clean_data.items():
            expected_type = hints.get(k)
            if _is_optional(expected_type) and (v is None or v == ''):
                clean_data[k] = None
            elif isinstance(v, str) and _accepts(expected_type, datetime):
                clean_data[k] = cls._parse_datetime(k, v)
        return clean_data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BaseModel":
        """
        Load model from a remote row or cached snapshot.

        Raises:
            ModelValidationError: If a datetime column holds a malformed value.
        """
        return cls(**cls.normalize(data))

    def as_dict(self, convert_datetime_to_iso_string: bool = False) -> Dict[str, Any]:
        """
        Convert this model to a dictionary in the remote row shape.

        Args:
            convert_datetime_to_iso_string (bool, optional): Whether to convert datetime to ISO strings.

        Returns:
            Dict[str, Any]: A dictionary representation of this model.
        """
        result = {}
        for f in fields(self):
            v = getattr(self, f.name)
            if convert_datetime_to_iso_string and isinstance(v, datetime):
                v = v.isoformat()
            result[f.metadata.get('alias') or f.name] = v
        return result

    def get_for_db(self) -> Dict[str, Any]:
        """
        Return the writable fields as a dict for an insert.
        """
        data = self.as_dict(convert_datetime_to_iso_string=True)
        return {k: v for k, v in data.items() if k in self.writable_fields()}

    def _run_field_validator(self, name: str, errors: list):
        """Run custom field validator if defined."""
        validator = getattr(self, f"validate_{name}", None)
        if callable(validator):
            error = validator()
            if error:
                errors.append(error)

    def _check_required(self, f, errors: list):
        if not f.metadata.get('required'):
            return
        value = getattr(self, f.name)
        if value is None or (isinstance(value, str) and not value.strip()):
            errors.append(f"'{f.name}' is required")

    def _check_pairs(self, errors: list):
        for first, second in self.paired_fields:
            if (getattr(self, first) is None) != (getattr(self, second) is None):
                errors.append(f"'{first}' and '{second}' must be set together")

    def validate(self):
        """
        Validate required fields and call `validate_<field_name>` methods if defined.
        Raise `ModelValidationError` if any validations fail.
        """
        errors = []
        for f in fields(self):
            self._check_required(f, errors)
            self._run_field_validator(f.name, errors)
        self._check_pairs(errors)

        if errors:
            raise ModelValidationError(errors)

    def prepare_for_save(self):
        """
        Prepare this model for writing to the remote data source.

        Empty optional strings are collapsed to None before validation.
        """
        hints = get_type_hints(type(self))
        for name in self.writable_fields():
            if _is_optional(hints.get(name)) and getattr(self, name) == '':
                setattr(self, name, None)
        self.validate()
