"""
    Generate an LCOV report of the Apex code coverage in a Salesforce org.
    Credentials can be set with APEXCOV_USERNAME and APEXCOV_PASSWORD
    to keep them out of the shell history.
"""
import argparse
import logging
import sys

import requests

from apex_code_coverage import persist_coverage, translate
from apexcov_config import resolve_config
from apexcov_errors import ApexcovError
from soap_login import authenticate
from tooling_query import fetch_coverage

__version__ = '1.0.0'

# Format logger
logging.basicConfig(format='%(message)s', level=logging.DEBUG)


def parse_args(argv=None):
    """
        Function to parse required arguments.
        instance - login URL, defaults to https://login.salesforce.com
        username - username of the Salesforce org
        password - password (with security token) of the Salesforce org
        api-version - API version for the login and the query
        directory - project directory holding classes/ and triggers/
        output - path to the LCOV report
    """
    parser = argparse.ArgumentParser(description='A Test Coverage Generator for Apex.')
    parser.add_argument('-i', '--instance')
    parser.add_argument('-u', '--username')
    parser.add_argument('-p', '--password')
    parser.add_argument('--api-version')
    parser.add_argument('-d', '--directory')
    parser.add_argument('-o', '--output')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    args = parser.parse_args(argv)
    return args


def build_session():
    session = requests.Session()
    session.headers['User-Agent'] = 'apexcov'
    return session


def main(config, session=None):
    """
        Main function to log in, query the coverage and write the report.
    """
    if session is None:
        session = build_session()

    instance_url, session_id = authenticate(config.instance, config.username, config.password,
                                            config.api_version, session)
    records = fetch_coverage(instance_url, session_id, config.api_version, session)
    body = translate(records, config.directory)
    return persist_coverage(body, config.output)


def cli(argv=None):
    """
        Console entry point. Exits 1 with a single message on any error.
    """
    try:
        config = resolve_config(parse_args(argv))
        main(config)
    except ApexcovError as err:
        # keep multi-line fault strings on one line
        logging.error(' '.join(str(err).split()))
        sys.exit(1)


if __name__ == '__main__':
    cli()
