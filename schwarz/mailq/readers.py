# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MIT

import os
from io import StringIO
from typing import List, TextIO, Union

from .mailq_parser import iter_entries, segment, QueueEntry


__all__ = ['iter_handle', 'read_file', 'read_handle', 'read_string']

StrPath = Union[str, os.PathLike]

def read_string(mailq_str: str, location_map=None, log=None) -> List[QueueEntry]:
    # "str.splitlines()" would also split on form feeds and other separators
    # which might appear in error messages or addresses.
    return read_handle(StringIO(mailq_str), location_map=location_map, log=log)


def read_handle(fp: TextIO, location_map=None, log=None) -> List[QueueEntry]:
    return segment(fp, location_map=location_map, log=log)


def iter_handle(fp: TextIO, location_map=None, log=None):
    return iter_entries(fp, location_map=location_map, log=log)


def read_file(path: StrPath, location_map=None, log=None, encoding='utf-8', errors='strict') -> List[QueueEntry]:
    # newline='\n': only "\n" terminates a line (no universal newlines)
    with open(path, 'r', encoding=encoding, errors=errors, newline='\n') as mailq_fp:
        return read_handle(mailq_fp, location_map=location_map, log=log)
