# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MIT
"""
Parse the output of Postfix' "mailq" command ("postqueue -p").

The output consists of a header line followed by one block of lines per
queued message. Blocks are separated by a blank line and the output usually
ends with a summary line ("-- 12 Kbytes in 3 Requests.").
"""

import logging
import re
from typing import Iterable, NamedTuple, Optional, Sequence, Tuple

from .spool_map import location_lookup


__all__ = [
    'iter_entries',
    'parse_block',
    'segment',
    'status_for_flag',
    'FormatError',
    'QueueEntry',
    'QueueStatus',
]

EMPTY_QUEUE_MARKER = 'Mail queue is empty'

_re_header = re.compile(r'^-+Queue ID-+')
_re_summary = re.compile(r'^-- \d+\s*.?bytes', re.IGNORECASE)
_re_entry_header = re.compile(r'''
    ^
    ([A-F0-9]+|[0-9B-Zb-z]+)   # queue id
    ([*!])?                    # status flag
    \s+
    (\d+)                      # size
    \s+
    (.{19})                    # date
    \s+
    (\S.+)                     # sender
    \Z
''', re.VERBOSE)


class FormatError(ValueError):
    pass


class QueueStatus(object):
    QUEUED  = 'queued'
    ACTIVE  = 'active'
    HELD    = 'held'
    UNKNOWN = 'unknown'

_STATUS_FOR = {
    '*': QueueStatus.ACTIVE,
    '!': QueueStatus.HELD,
}

def status_for_flag(flag: Optional[str]) -> str:
    if not flag:
        return QueueStatus.QUEUED
    return _STATUS_FOR.get(flag, QueueStatus.UNKNOWN)


class QueueEntry(NamedTuple):
    queue_id        : Optional[str]
    status          : str
    size            : Optional[int]
    date            : Optional[str]
    sender          : Optional[str]
    error_string    : Optional[str] = None
    remaining_rcpts : Tuple[str, ...] = ()
    location        : Optional[str] = None

    @property
    def is_degraded(self):
        return (self.queue_id is None)

    def as_dict(self):
        entry_dict = dict(self._asdict())
        entry_dict['remaining_rcpts'] = list(self.remaining_rcpts)
        return entry_dict


def _chomp(line):
    if line.endswith('\r\n'):
        return line[:-2]
    elif line.endswith('\n'):
        return line[:-1]
    return line


def _is_blank(line):
    return (_chomp(line) == '')


def parse_block(lines: Sequence[str], log=None) -> QueueEntry:
    """Return the QueueEntry for all lines of a single block in mailq output.

    A block starts with a line containing queue id, status flag, size, date
    and sender. An optional (unindented) line with the last delivery error
    follows, all other (indented) lines list the remaining recipients.

    If the first line can not be parsed the entry is returned anyway but
    without queue id, size, date and sender (status "unknown").
    """
    block = [_chomp(line) for line in lines]
    first = block.pop(0) if block else ''
    error_string = None
    if block and re.match(r'\S', block[0]):
        error_string = block.pop(0)
    remaining_rcpts = tuple(line.lstrip() for line in block)

    match = _re_entry_header.search(first)
    if match is None:
        if log is None:
            log = logging.getLogger('mailq.parser')
        log.warning('unable to parse queue entry: %r', first)
        return QueueEntry(
            queue_id        = None,
            status          = QueueStatus.UNKNOWN,
            size            = None,
            date            = None,
            sender          = None,
            error_string    = error_string,
            remaining_rcpts = remaining_rcpts,
        )

    queue_id, status_chr, size_str, date, sender = match.groups()
    return QueueEntry(
        queue_id        = queue_id,
        status          = status_for_flag(status_chr),
        size            = int(size_str),
        date            = date,
        sender          = sender,
        error_string    = error_string,
        remaining_rcpts = remaining_rcpts,
    )


def iter_entries(lines: Iterable[str], location_map=None, log=None):
    """Return an iterator over the QueueEntry of each message in the mailq output.

    "location_map" can be a dict-like object or a callable which maps a
    queue id to its location (e.g. the spool name). The location is only a
    hint as messages might have been moved since mailq was run.

    Raises a FormatError if the first line is not the mailq header. This
    happens before the first entry is returned.
    """
    if log is None:
        log = logging.getLogger('mailq.parser')
    entries = _iter_entries(iter(lines), location_lookup(location_map), log)
    # The generator yields the validated header line first (None for an empty
    # queue) so any FormatError is raised right here.
    header_line = next(entries)
    if header_line is None:
        return iter(())
    return entries


def segment(lines: Iterable[str], location_map=None, log=None):
    return list(iter_entries(lines, location_map=location_map, log=log))


def _iter_entries(line_iter, lookup, log):
    first = next(line_iter, None)
    if first is None:
        raise FormatError('missing header')
    first = _chomp(first)
    if first == EMPTY_QUEUE_MARKER:
        log.debug('mail queue is empty')
        yield None
        return
    if not _re_header.match(first):
        raise FormatError('missing header')
    yield first

    current = []
    for line in line_iter:
        if _is_blank(line):
            if current:
                yield _build_entry(current, lookup, log)
                current = []
            continue
        current.append(line)

    if current:
        if _re_summary.match(current[0]):
            log.debug('ignoring summary line: %s', _chomp(current[0]))
        else:
            yield _build_entry(current, lookup, log)


def _build_entry(block, lookup, log):
    entry = parse_block(block, log=log)
    if (lookup is not None) and not entry.is_degraded:
        location = lookup(entry.queue_id)
        if location is not None:
            entry = entry._replace(location=location)
    return entry
