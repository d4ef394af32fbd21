"""
    Query Apex code coverage with the Tooling API.
    Requires the instance URL and session ID from the SOAP login.
"""
import logging
from collections import namedtuple
from urllib.parse import quote_plus

import requests
from simple_salesforce import Salesforce
from simple_salesforce.exceptions import SalesforceError

from api_version import API_VERSION
from apexcov_errors import FetchError

COVERAGE_QUERY = ('SELECT ApexClassOrTriggerId, ApexClassorTrigger.Name, Coverage '
                  'FROM ApexCodeCoverageAggregate '
                  'WHERE NOT ApexClassorTrigger.Name = null')

CoverageRecord = namedtuple('CoverageRecord', ['entity_id', 'name',
                                               'covered_lines', 'uncovered_lines'])


def get_salesforce_connection(instance_url, session_id, api_version=API_VERSION, session=None):
    """
        Connect to Salesforce with an existing session.
    """
    return Salesforce(instance_url=instance_url, session_id=session_id,
                      version=api_version, session=session)


def parse_lines(lines, item):
    """
        Function to check a list of line numbers.
        Only JSON integers are accepted, bools and floats are rejected.
    """
    if lines is None:
        return []
    if not isinstance(lines, list):
        raise FetchError(f'Malformed coverage record: {item!r}')
    for line in lines:
        if isinstance(line, bool) or not isinstance(line, int):
            raise FetchError(f'Malformed coverage record: {item!r}')
    return list(lines)


def parse_record(item):
    """
        Function to convert one ApexCodeCoverageAggregate record.
    """
    if not isinstance(item, dict):
        raise FetchError(f'Unexpected coverage record: {item!r}')
    owner = item.get('ApexClassOrTrigger') or {}
    coverage = item.get('Coverage') or {}
    if not isinstance(owner, dict) or not isinstance(coverage, dict):
        raise FetchError(f'Malformed coverage record: {item!r}')

    entity_id = item.get('ApexClassOrTriggerId')
    name = owner.get('Name')
    if not isinstance(entity_id, str) or not isinstance(name, str):
        raise FetchError(f'Malformed coverage record: {item!r}')

    return CoverageRecord(
        entity_id=entity_id,
        name=name,
        covered_lines=parse_lines(coverage.get('coveredLines'), item),
        uncovered_lines=parse_lines(coverage.get('uncoveredLines'), item),
    )


def parse_query_data(query_data):
    """
        Function to convert the query response into coverage records.
        Records keep the order returned by the API.
    """
    if not isinstance(query_data, dict):
        raise FetchError('The coverage query did not return a JSON object')
    records = query_data.get('records')
    if records is None:
        logging.warning("No 'records' key found in the query response.")
        return []
    if not isinstance(records, list):
        raise FetchError("The 'records' key in the query response is not a list")
    return [parse_record(item) for item in records]


def fetch_coverage(instance_url, session_id, api_version=API_VERSION, session=None):
    """
        Function to query ApexCodeCoverageAggregate.
        Returns a list of CoverageRecord.
    """
    sf = get_salesforce_connection(instance_url, session_id, api_version, session)
    try:
        query_data = sf.toolingexecute(f'query?q={quote_plus(COVERAGE_QUERY)}', 'GET')
    except SalesforceError as err:
        raise FetchError(f'The coverage query failed: {err}') from err
    except requests.RequestException as err:
        raise FetchError(f'Unable to reach {instance_url}: {err}') from err

    records = parse_query_data(query_data)
    logging.info('Fetched coverage for %d classes and triggers.', len(records))
    return records
