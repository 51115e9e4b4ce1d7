"""
Configuration management for vcrbpkg.
"""

import os
import yaml
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .exceptions import ConfigurationError
from .logging_config import get_logger, normalize_level
from .models import RuntimeProfile, VersionSpec

logger = get_logger('config')


@dataclass
class RubyConfig:
    """Configuration for Ruby installation through rvm."""
    default_version: str = "3.2.2"  # used when no version source matches
    gemset: str = "veracode"
    openssl_dir: str = "/usr/local/rvm/usr/"


@dataclass
class ProbeConfig:
    """Configuration for the Rails environment boot probe."""
    boot_timeout: float = 15.0  # seconds
    profiles: List[str] = field(default_factory=lambda: [p.value for p in RuntimeProfile])


@dataclass
class PackagingConfig:
    """Configuration for cloning and the veracode gem."""
    gem_source: str = "https://rubygems.org"
    clone_depth: int = 1


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"
    log_file: Optional[str] = None
    verbose: bool = False


@dataclass
class Config:
    """Main configuration class."""
    ruby: RubyConfig = field(default_factory=RubyConfig)
    probe: ProbeConfig = field(default_factory=ProbeConfig)
    packaging: PackagingConfig = field(default_factory=PackagingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def default_ruby_version(self) -> VersionSpec:
        return VersionSpec.parse(self.ruby.default_version)

    @property
    def probe_profiles(self) -> List[RuntimeProfile]:
        return [RuntimeProfile(name) for name in self.probe.profiles]


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from file or use defaults.

    Args:
        config_path: Optional path to configuration file

    Returns:
        Config object with loaded settings

    Raises:
        ConfigurationError: If configuration file is invalid
    """
    config = Config()

    if config_path and os.path.exists(config_path):
        try:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")
        except OSError as e:
            raise ConfigurationError(f"Error loading configuration file: {e}")

        if config_data:
            if not isinstance(config_data, dict):
                raise ConfigurationError(f"Configuration file {config_path} must contain a mapping")
            _update_config_from_dict(config, config_data)
            logger.info(f"Loaded configuration from {config_path}")

    elif config_path:
        logger.warning(f"Configuration file not found: {config_path}")

    validation_errors = validate_config(config)
    if validation_errors:
        raise ConfigurationError("Configuration validation failed:\n" + "\n".join(validation_errors))

    return config


def validate_config(config: Config) -> List[str]:
    """Return a list of human readable problems with the configuration."""
    errors = []

    if VersionSpec.parse(str(config.ruby.default_version)) is None:
        errors.append(f"ruby.default_version '{config.ruby.default_version}' is not a major.minor.patch version")

    if not config.ruby.gemset:
        errors.append("ruby.gemset must not be empty")

    try:
        timeout = float(config.probe.boot_timeout)
    except (TypeError, ValueError):
        errors.append(f"probe.boot_timeout '{config.probe.boot_timeout}' is not a number")
    else:
        if timeout <= 0:
            errors.append(f"probe.boot_timeout must be positive, got {timeout}")

    known_profiles = {p.value for p in RuntimeProfile}
    if not config.probe.profiles:
        errors.append("probe.profiles must name at least one environment")
    for profile in config.probe.profiles or []:
        if not isinstance(profile, str) or profile not in known_profiles:
            errors.append(f"probe.profiles contains unknown environment '{profile}'")

    if (not isinstance(config.packaging.clone_depth, int) or isinstance(config.packaging.clone_depth, bool)
            or config.packaging.clone_depth < 1):
        errors.append(f"packaging.clone_depth must be a positive integer, got {config.packaging.clone_depth}")

    try:
        normalize_level(config.logging.level)
    except ValueError as e:
        errors.append(f"logging.level: {e}")

    return errors


def _update_config_from_dict(config: Config, config_data: Dict) -> None:
    """
    Update configuration object from dictionary data.

    Args:
        config: Config object to update
        config_data: Dictionary with configuration data
    """
    if 'ruby' in config_data:
        ruby_data = _section(config_data, 'ruby')
        if 'default_version' in ruby_data:
            config.ruby.default_version = str(ruby_data['default_version'])
        if 'gemset' in ruby_data:
            config.ruby.gemset = ruby_data['gemset']
        if 'openssl_dir' in ruby_data:
            config.ruby.openssl_dir = ruby_data['openssl_dir']

    if 'probe' in config_data:
        probe_data = _section(config_data, 'probe')
        if 'boot_timeout' in probe_data:
            config.probe.boot_timeout = probe_data['boot_timeout']
        if 'profiles' in probe_data:
            profiles = probe_data['profiles'] or []
            config.probe.profiles = list(profiles) if isinstance(profiles, list) else [profiles]

    if 'packaging' in config_data:
        packaging_data = _section(config_data, 'packaging')
        if 'gem_source' in packaging_data:
            config.packaging.gem_source = packaging_data['gem_source']
        if 'clone_depth' in packaging_data:
            config.packaging.clone_depth = packaging_data['clone_depth']

    if 'logging' in config_data:
        logging_data = _section(config_data, 'logging')
        if 'level' in logging_data:
            config.logging.level = logging_data['level']
        if 'log_file' in logging_data:
            config.logging.log_file = logging_data['log_file']
        if 'verbose' in logging_data:
            config.logging.verbose = logging_data['verbose']


def _section(config_data: Dict, name: str) -> Dict:
    """Sub-mapping for one configuration section, empty when the section is blank."""
    section = config_data[name]
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Configuration section '{name}' must be a mapping, got {type(section).__name__}")
    return section


def get_default_config_path() -> Optional[str]:
    """
    Get the default configuration file path.

    Returns:
        Path to default config file if it exists, None otherwise
    """
    possible_paths = [
        'vcrbpkg.yaml',
        'vcrbpkg.yml',
        os.path.expanduser('~/.vcrbpkg.yaml'),
        os.path.expanduser('~/.vcrbpkg.yml'),
    ]

    for path in possible_paths:
        if os.path.exists(path):
            return path

    return None
