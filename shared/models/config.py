from typing import Literal

from pydantic import BaseModel


class EnvConfig(BaseModel):
    """
    Describes one environment setting a client needs, relative to the client's key prefix.

    Attributes:
        env_key (str): Raw key name, e.g. "BASE_URL" for SEARCH_ELASTICSEARCH_BASE_URL.
        val_type (str): Expected value type: "string", "number", "bool" or "list".
        default (str | int | float | bool | list | None): Fallback value. None marks the setting as required.
    """

    env_key: str
    val_type: Literal["string", "number", "bool", "list"] = "string"
    default: str | int | float | bool | list | None = None
