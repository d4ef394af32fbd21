"""
    Resolve the apexcov configuration once at startup.
    Precedence: command-line flag > environment variable > default.
"""
import os
from collections import namedtuple
from urllib.parse import urlparse

from api_version import API_VERSION, check_api_version
from apexcov_errors import ValidationError

DEFAULT_INSTANCE = 'https://login.salesforce.com'
DEFAULT_OUTPUT = os.path.join('.', 'coverage', 'lcov.info')

ENV_INSTANCE = 'APEXCOV_INSTANCE'
ENV_USERNAME = 'APEXCOV_USERNAME'
ENV_PASSWORD = 'APEXCOV_PASSWORD'
ENV_API_VERSION = 'APEXCOV_API_VERSION'

Config = namedtuple('Config', ['instance', 'username', 'password',
                               'api_version', 'directory', 'output'])


def _first_set(*values):
    """
        Return the first value which is not None or an empty string.
    """
    for value in values:
        if value:
            return value
    return None


def is_valid_instance(instance):
    """
        Function to check the instance is an absolute URL with a host.
    """
    if not instance:
        return False
    parsed = urlparse(instance)
    return bool(parsed.scheme and parsed.netloc)


def validate_config(config):
    """
        Function to validate the inputs before any network activity.
    """
    if not config.username:
        raise ValidationError('You must provide a username')
    if not config.password:
        raise ValidationError('You must provide a password')
    if not is_valid_instance(config.instance):
        raise ValidationError('You must provide a valid instance URL')
    check_api_version(config.api_version)
    return config


def resolve_config(args, environ=None):
    """
        Build the Config from parsed arguments and environment variables.
        args - argparse namespace, unset flags are None
        environ - mapping to read overrides from, defaults to os.environ
    """
    if environ is None:
        environ = os.environ

    config = Config(
        instance=_first_set(args.instance, environ.get(ENV_INSTANCE), DEFAULT_INSTANCE),
        username=_first_set(args.username, environ.get(ENV_USERNAME)),
        password=_first_set(args.password, environ.get(ENV_PASSWORD)),
        api_version=_first_set(args.api_version, environ.get(ENV_API_VERSION), API_VERSION),
        directory=_first_set(args.directory, os.getcwd()),
        output=_first_set(args.output, DEFAULT_OUTPUT),
    )
    return validate_config(config)
