import os
from typing import Dict, TypeVar

from dotenv import dotenv_values

from .env import Env

T = TypeVar("T", bound=Env)


def load_env(
    default: type[T] = Env,
    env_file: str | None = ".env",
) -> T:
    """
    Build settings from the process environment, then a dotenv file.
    Values from the file win. Names the model does not declare are ignored.
    """
    converters = default.types_map()

    raw_values: Dict[str, str] = {
        envar_name: envar_value
        for envar_name in converters
        if (envar_value := os.getenv(envar_name))
    }

    if env_file and os.path.exists(env_file):
        raw_values.update({
            envar_name: envar_value
            for envar_name, envar_value in dotenv_values(dotenv_path=env_file).items()
            if envar_name in converters and envar_value is not None
        })

    return default(**{
        envar_name: converters[envar_name](envar_value)
        for envar_name, envar_value in raw_values.items()
    })
