"""
    Convert Tooling API code coverage into the LCOV tracefile format.
    Input - coverage records from the ApexCodeCoverageAggregate query
    Output - lcov.info with TN, SF, DA and end_of_record lines
"""
import logging
import os

from apexcov_errors import PersistError

# ApexClass IDs start with this key prefix, everything else is an ApexTrigger
CLASS_ID_PREFIX = '01p'


def is_class(entity_id):
    return entity_id.startswith(CLASS_ID_PREFIX)


def source_path(record, working_directory):
    """
        Function to build the local path of the class or trigger.
    """
    if is_class(record.entity_id):
        return os.path.join(working_directory, 'classes', f'{record.name}.cls')
    return os.path.join(working_directory, 'triggers', f'{record.name}.trigger')


def record_lines(file_path, record):
    """
        Function to build the LCOV block for one file.
        Covered lines come first, then uncovered lines, each in the given order.
    """
    lines = [f'SF:{file_path}']
    lines.extend(f'DA:{line},1' for line in record.covered_lines)
    lines.extend(f'DA:{line},0' for line in record.uncovered_lines)
    lines.append('end_of_record')
    return lines


def translate(records, working_directory):
    """
        Function to convert coverage records to LCOV text.
        Records whose file is not in the working directory are skipped.
    """
    lines = ['TN:']
    for record in records:
        file_path = source_path(record, working_directory)
        # only report files present in the local project
        if not os.path.isfile(file_path):
            logging.debug('Skipping %s, file not found.', file_path)
            continue
        lines.extend(record_lines(file_path, record))
    return '\n'.join(lines) + '\n'


def persist_coverage(body, output_path):
    """
        Function to write the LCOV report, creating the directory if needed.
    """
    try:
        directory = os.path.dirname(output_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8', newline='') as lcov_file:
            lcov_file.write(body)
    except OSError as err:
        raise PersistError(f'Unable to write {output_path}: {err}') from err
    logging.info('Coverage written to %s', output_path)
    return output_path
