"""
    Log in to the Salesforce SOAP API.
    Returns the instance URL and session ID used by the Tooling API query.
"""
import logging
import xml.etree.ElementTree as ET
from urllib.parse import urlparse
from xml.sax.saxutils import escape

import requests

from api_version import API_VERSION
from apexcov_errors import AuthError

SOAP_LOGIN_TEMPLATE = '''<soapenv:Envelope xmlns:soapenv="http://schemas.xmlsoap.org/soap/envelope/"
  xmlns:urn="urn:partner.soap.sforce.com">
  <soapenv:Body>
    <urn:login>
      <urn:username>{username}</urn:username>
      <urn:password>{password}</urn:password>
    </urn:login>
  </soapenv:Body>
</soapenv:Envelope>
'''

SOAP_HEADERS = {
    'Content-Type': 'text/xml',
    'SOAPAction': 'login',
}

# element paths below the Envelope, namespaces ignored
SESSION_ID_PATH = ('Body', 'loginResponse', 'result', 'sessionId')
SERVER_URL_PATH = ('Body', 'loginResponse', 'result', 'serverUrl')
FAULT_CODE_PATH = ('Body', 'Fault', 'faultcode')
FAULT_STRING_PATH = ('Body', 'Fault', 'faultstring')


def build_login_envelope(username, password):
    """
        Function to build the SOAP login request body.
        Credentials are XML-escaped.
    """
    return SOAP_LOGIN_TEMPLATE.format(username=escape(username),
                                      password=escape(password))


def login_url(instance, api_version=API_VERSION):
    """
        Function to build the SOAP endpoint for the instance.
    """
    return f'{instance.rstrip("/")}/services/Soap/u/{api_version}'


def _local_name(tag):
    return tag.rsplit('}', 1)[-1]


def find_text(root, path):
    """
        Walk the element path from root by local name.
        Returns None when any element on the path is missing.
    """
    element = root
    for name in path:
        element = next((child for child in element if _local_name(child.tag) == name), None)
        if element is None:
            return None
    return element.text or ''


def check_soap_fault(root):
    """
        Function to raise the SOAP fault string, if the body holds a fault.
    """
    fault_code = find_text(root, FAULT_CODE_PATH)
    if fault_code:
        raise AuthError(find_text(root, FAULT_STRING_PATH) or fault_code)


def parse_login_response(body):
    """
        Function to parse the SOAP login response.
        The fault check runs before the success payload is read.
    """
    try:
        root = ET.fromstring(body)
    except ET.ParseError as err:
        raise AuthError(f'Unable to parse the login response: {err}') from err

    check_soap_fault(root)

    session_id = find_text(root, SESSION_ID_PATH)
    server_url = find_text(root, SERVER_URL_PATH)
    if not session_id or not server_url:
        raise AuthError('The login response did not include a session ID and server URL')

    host = urlparse(server_url).netloc
    return f'https://{host}', session_id


def authenticate(instance, username, password, api_version=API_VERSION, session=None):
    """
        Function to log in with the SOAP API.
        Returns (instance_url, session_id).
    """
    if session is None:
        session = requests.Session()

    url = login_url(instance, api_version)
    logging.info('Logging in to %s', instance)
    try:
        response = session.post(url, data=build_login_envelope(username, password).encode('utf-8'),
                                headers=SOAP_HEADERS)
    except requests.RequestException as err:
        raise AuthError(f'Unable to reach {url}: {err}') from err

    if response.status_code == 401:
        raise AuthError('Unauthorized')

    instance_url, session_id = parse_login_response(response.content)
    logging.info('Logged in. Instance URL: %s', instance_url)
    return instance_url, session_id
