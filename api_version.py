import re

from apexcov_errors import ValidationError

# API version used for both the SOAP login and the Tooling API query
API_VERSION = '39.0'


def check_api_version(api_version):
    """
        Function to confirm the API version looks like "39.0".
    """
    if not api_version or not re.fullmatch(r'\d+\.0', api_version):
        raise ValidationError(f'You must provide a valid API version, not "{api_version}"')
    return api_version
