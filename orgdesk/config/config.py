"""
Config class that reads the environment, optionally seeded from a .env file.
"""
import os
import re
import json
from abc import abstractmethod
from typing import Optional
import logging
from dotenv import load_dotenv

from orgdesk.cache.enums import StorageBackend
from orgdesk.cache.factory import storage_factory
from orgdesk.cache.store import DEFAULT_TTL_MINUTES

logger = logging.getLogger(__name__)


class BaseConfig():
    """
    Config class that allows to load from a .toml file, and/or use a .env file.
    """
    def __init__(self):
        load_dotenv()
        self.project_version = None
        self.env_vars = {key: os.getenv(key) for key in os.environ}

    def get_env_vars(self) -> dict:
        """
        Return the dictionary containing all environment variables
        """
        return self.env_vars

    def get_env_var(self, var_name: str, default=None):
        """
        Retrieve the value of the specified environment variable
        Args:
            var_name (str) : Name of the env var to fetch
            default : Returned when the variable is not set
        """
        if var_name in self.env_vars.keys():
            return self.env_vars[var_name]
        logger.debug("Variable %s not found.", var_name)
        return default

    def load_toml(self, toml_folder_dir: str, log_version_string: bool = True) -> bool:
        """
        Loads the project version from the pyproject.toml in `toml_folder_dir`
        """
        pyproject_path = os.path.join(toml_folder_dir, 'pyproject.toml')
        try:
            with open(pyproject_path, 'r', encoding='UTF-8') as file:
                version_match = re.search(r'version\s*=\s*[\'"]([^\'"]+)[\'"]', file.read())
        except FileNotFoundError:
            logger.error('pyproject.toml not found for toml_folder_dir = %s', toml_folder_dir)
            return False
        if not version_match:
            logger.error('Version not found in pyproject.toml.')
            return False
        self.project_version = version_match.group(1)
        if log_version_string:
            logger.info('Project Version: %s', self.project_version)
        return True

    def get_project_version(self) -> Optional[str]:
        """
        Returns the project version from the toml file
        """
        return self.project_version

    def get_var_as_list(self, var_name: str) -> Optional[list]:
        """
        Returns a comma-delimited var as list
        """
        if var_name in self.env_vars.keys():
            return [env_var.strip() for env_var in self.env_vars[var_name].split(",")]
        logger.warning("Warning: var %s not found.", var_name)
        return None

    def convert_var_from_json_string(self, var_name: str) -> bool:
        """
        Converts a json string into a pythonic type
        """
        if var_name in self.env_vars.keys():
            try:
                self.env_vars[var_name] = json.loads(self.env_vars[var_name])
                return True
            except ValueError:
                logger.error("Error: Invalid input format. Please provide a proper json string.")
                return False
        logger.warning("Warning: var %s not found.", var_name)
        return False

    @abstractmethod
    def validate_env_vars(self):
        """
        Abstract method for validation of the env vars.
        """


class OrgDeskConfig(BaseConfig):
    """
    Settings of an orgdesk workspace.

    ORGDESK_STORAGE_BACKEND     memory | file | dynamodb (default memory)
    ORGDESK_CACHE_DIR           directory for the file backend
    ORGDESK_DYNAMODB_TABLE      table for the dynamodb backend
    AWS_REGION                  region for the dynamodb backend
    ORGDESK_DEFAULT_TTL_MINUTES TTL for every collection without its own variable
    ORGDESK_TTL_<ENTITY>        per-collection TTL, e.g. ORGDESK_TTL_PEOPLE
    """

    DEFAULT_TTLS = {
        'organizations': 30,
        'people': 10,
        'teams': 15,
        'licenses': 15,
        'seats': 10,
        'assets': 10,
    }

    def __init__(self):
        super().__init__()
        self.validate_env_vars()

    @property
    def storage_backend(self) -> StorageBackend:
        return StorageBackend(self.get_env_var('ORGDESK_STORAGE_BACKEND', StorageBackend.memory.value))

    @property
    def cache_dir(self) -> str:
        return self.get_env_var('ORGDESK_CACHE_DIR', os.path.join(os.getcwd(), '.orgdesk-cache'))

    @property
    def dynamodb_table(self) -> Optional[str]:
        return self.get_env_var('ORGDESK_DYNAMODB_TABLE')

    @property
    def aws_region(self) -> Optional[str]:
        return self.get_env_var('AWS_REGION')

    def storage_options(self) -> dict:
        """Keyword arguments for `storage_factory.get` matching the configured backend."""
        if self.storage_backend == StorageBackend.file:
            return {'directory': self.cache_dir}
        if self.storage_backend == StorageBackend.dynamodb:
            return {
                'table_name': self.dynamodb_table,
                'aws_access_key_id': self.get_env_var('AWS_ACCESS_KEY_ID'),
                'aws_access_key_secret': self.get_env_var('AWS_SECRET_ACCESS_KEY'),
                'region_name': self.aws_region,
            }
        return {}

    def build_storage(self):
        """The cache storage selected by ORGDESK_STORAGE_BACKEND."""
        return storage_factory.get(self.storage_backend, **self.storage_options())

    @property
    def default_ttl(self) -> float:
        return float(self.get_env_var('ORGDESK_DEFAULT_TTL_MINUTES', DEFAULT_TTL_MINUTES))

    def ttl_for(self, entity: str) -> float:
        """
        Cache TTL in minutes for an entity collection: ORGDESK_TTL_<ENTITY>, else
        ORGDESK_DEFAULT_TTL_MINUTES when set, else the built-in per-entity TTL.
        """
        value = self.get_env_var(f'ORGDESK_TTL_{entity.upper()}')
        if value is not None:
            return float(value)
        if self.get_env_var('ORGDESK_DEFAULT_TTL_MINUTES') is not None:
            return self.default_ttl
        return self.DEFAULT_TTLS.get(entity, self.default_ttl)

    def validate_env_vars(self):
        """
        Raises ValueError on an unknown backend, a non-positive TTL, or a
        dynamodb backend without a table.
        """
        try:
            backend = self.storage_backend
        except ValueError as e:
            raise ValueError(
                f"ORGDESK_STORAGE_BACKEND must be one of {[b.value for b in StorageBackend]}") from e

        if backend == StorageBackend.dynamodb and not self.dynamodb_table:
            raise ValueError("ORGDESK_DYNAMODB_TABLE is required for the dynamodb backend")

        names = ['ORGDESK_DEFAULT_TTL_MINUTES'] + [f'ORGDESK_TTL_{e.upper()}' for e in self.DEFAULT_TTLS]
        for name in names:
            value = self.get_env_var(name)
            if value is None:
                continue
            try:
                minutes = float(value)
            except ValueError as e:
                raise ValueError(f"{name} must be a number of minutes, got {value!r}") from e
            if minutes <= 0:
                raise ValueError(f"{name} must be positive, got {value!r}")
