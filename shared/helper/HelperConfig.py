"""Environment backed settings of the search bridge.

Every setting is an upper-case environment variable. An empty variable counts
as unset. A setting without default is required and its absence is a
configuration error raised at the point of use.
"""

import logging
import os
from typing import Iterable

TRUE_VALUES = ("true", "1", "yes", "on")
FALSE_VALUES = ("false", "0", "no", "off")


class HelperConfig:
    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def _read(self, key: str, default):
        """Return the stripped raw value of a setting, or the default if it is unset.

        Raises:
            ValueError: If the setting is unset and has no default.
        """
        key = key.upper()
        raw = (os.getenv(key) or "").strip()
        if raw:
            return raw
        if default is None:
            raise ValueError(f"Environment variable '{key}' is not set.")
        return default

    def get_string_val(self, key: str, default: str | None = None) -> str:
        return self._read(key, default)

    def get_number_val(self, key: str, default: float | int | None = None) -> float | int:
        """Read a numeric setting. Values containing a dot are floats, all others integers.

        Raises:
            ValueError: If the setting is missing or not a number.
        """
        raw = self._read(key, default)
        if not isinstance(raw, str):
            return raw
        try:
            return float(raw) if "." in raw else int(raw)
        except ValueError:
            raise ValueError(f"Environment variable '{key.upper()}' is not a valid number: '{raw}'.")

    def get_bool_val(self, key: str, default: bool | None = None) -> bool:
        """Read a boolean setting.

        Raises:
            ValueError: If the setting is missing or not one of the known boolean spellings.
        """
        raw = self._read(key, default)
        if isinstance(raw, bool):
            return raw
        if raw.lower() in TRUE_VALUES:
            return True
        if raw.lower() in FALSE_VALUES:
            return False
        raise ValueError(f"Environment variable '{key.upper()}' is not a valid boolean: '{raw}'.")

    def get_choice_val(self, key: str, choices: Iterable[str], default: str | None = None) -> str:
        """Read a setting restricted to a fixed set of lower-case values.

        Args:
            key (str): Environment variable name (case-insensitive).
            choices (Iterable[str]): Accepted values.
            default (str | None): Fallback value if the variable is not set.

        Returns:
            str: The lower-cased value.

        Raises:
            ValueError: If the setting is missing or not one of the choices.
        """
        choices = tuple(choices)
        value = self._read(key, default).lower()
        if value not in choices:
            raise ValueError(f"Unsupported {key.upper()} '{value}'. Use one of {', '.join(choices)}.")
        return value

    def get_list_val(self, key: str, default: list | None = None, separator: str = ",", element_type: type = str) -> list:
        """Read a list setting in the form "[elem1,elem2,...]".

        Args:
            key (str): Environment variable name (case-insensitive).
            default (list | None): Fallback value if the variable is not set.
            separator (str): The delimiter between elements.
            element_type (type): The type each element is cast to.

        Returns:
            list: The elements, without blanks.

        Raises:
            ValueError: If the setting is missing, not wrapped in brackets, or an element cannot be cast.
        """
        raw = self._read(key, default)
        if isinstance(raw, list):
            return raw
        if not raw.startswith("[") or not raw.endswith("]"):
            raise ValueError(f"Environment variable '{key.upper()}' must be in the format '[elem1{separator}elem2{separator}...]'. Got: '{raw}'")
        elements = [v.strip() for v in raw[1:-1].split(separator) if v.strip()]
        try:
            return [element_type(elem) for elem in elements]
        except ValueError as e:
            raise ValueError(f"Environment variable '{key.upper()}' contains invalid elements: {e}. Type set to {element_type.__name__}. Got: '{raw}'")

    def get_logger(self) -> logging.Logger:
        return self._logger
