# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MIT

import json
import logging
import sys

import docopt

from ..app_helpers import guess_config_path, init_app
from ..mailq_parser import FormatError
from ..readers import read_file, read_handle
from ..spool_map import parse_spool_map, scan_spool_dirs


__all__ = [
    'build_text_output',
    'mailq_parse_main',
]

OUTPUT_FORMATS = ('json', 'text')

def mailq_parse_main(argv=sys.argv, return_rc_code=False):
    """mailq-parse.

    Convert the output of Postfix' "mailq" command to JSON.

    Usage:
        mailq-parse [options] [<mailq_output>]

    Options:
        -C, --config=<CFG>      Path to the config file
        --spool-map=<FILE>      file with "queue_id: location" lines
        --spool-dir=<DIR>       Postfix queue directory used to locate messages
        --format=<FMT>          output format: "json" or "text" [default: json]
        --verbose -v            more verbose program output
        --quiet                 suppress (most) logging
    """
    arguments = docopt.docopt(mailq_parse_main.__doc__, argv=argv[1:])
    config_path = guess_config_path(arguments['--config'])
    cli_options = {
        'verbose': arguments['--verbose'],
        'quiet'  : arguments['--quiet'],
    }
    settings = init_app(config_path, options=cli_options)
    log = logging.getLogger('mailq')

    output_format = arguments['--format']
    if output_format not in OUTPUT_FORMATS:
        sys.stderr.write('Unknown output format "%s".\n' % output_format)
        return _exit(42, return_rc_code)

    location_map = _build_location_map(
        spool_map_path = arguments['--spool-map'] or settings.get('spool_map'),
        spool_dir      = arguments['--spool-dir'] or settings.get('spool_dir'),
        log            = log,
    )
    mailq_path = arguments['<mailq_output>']
    parser_log = logging.getLogger('mailq.parser')
    try:
        if mailq_path and (mailq_path != '-'):
            entries = read_file(mailq_path, location_map=location_map, log=parser_log)
        else:
            entries = read_handle(sys.stdin, location_map=location_map, log=parser_log)
    except OSError as e:
        sys.stderr.write('Unable to read mailq output: %s\n' % e)
        return _exit(41, return_rc_code)
    except UnicodeDecodeError as e:
        sys.stderr.write('Unable to decode mailq output (expected UTF-8): %s\n' % e)
        return _exit(41, return_rc_code)
    except FormatError as e:
        sys.stderr.write('Input is not mailq output: %s\n' % e)
        return _exit(40, return_rc_code)

    log.debug('parsed %d queue entries', len(entries))
    if output_format == 'json':
        cli_output = json.dumps([entry.as_dict() for entry in entries], indent=2)
    else:
        cli_output = build_text_output(entries)
    print(cli_output)
    return _exit(0, return_rc_code)


def _exit(exit_code, return_rc_code):
    if return_rc_code:
        return exit_code
    sys.exit(exit_code)


def _build_location_map(spool_map_path, spool_dir, log):
    if not (spool_map_path or spool_dir):
        return None
    location_map = {}
    if spool_dir:
        location_map.update(scan_spool_dirs(spool_dir, log=logging.getLogger('mailq.spool')))
    if spool_map_path:
        try:
            location_map.update(parse_spool_map(spool_map_path))
        except OSError as e:
            log.error('Unable to read spool map "%s": %s', spool_map_path, e)
    return location_map


def build_text_output(entries) -> str:
    lines = []
    total_bytes = 0
    for entry in entries:
        recipients_str = ', '.join(entry.remaining_rcpts)
        if entry.is_degraded:
            # no queue id/sender/size/date available
            lines.append('- (unparsable entry)')
            lines.append(f'  To: {recipients_str}')
        else:
            total_bytes += entry.size
            lines.extend([
                f'- Queue ID: {entry.queue_id} ({entry.status})',
                f'  From: {entry.sender}',
                f'  To: {recipients_str}',
                f'  Size: {entry.size}',
                f'  Date: {entry.date}',
            ])
        if entry.error_string:
            lines.append(f'  Error: {entry.error_string}')
        if entry.location:
            lines.append(f'  Location: {entry.location}')
    lines.append(f'{len(entries)} messages, {total_bytes} bytes')
    return '\n'.join(lines)
