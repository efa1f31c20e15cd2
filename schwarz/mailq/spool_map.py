# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MIT
"""Map queue ids to the (Postfix) spool where a message currently resides."""

import os
import re
from typing import Callable, Dict, Optional, Sequence, TextIO, Union

from boltons.fileutils import iter_find_files


__all__ = [
    'location_lookup',
    'parse_spool_map',
    'scan_spool_dirs',
    'POSTFIX_SPOOLS',
]

StrPath = Union[str, os.PathLike]

POSTFIX_SPOOLS = ('incoming', 'active', 'deferred', 'hold', 'corrupt')


def location_lookup(location_map) -> Optional[Callable[[str], Optional[str]]]:
    if location_map is None:
        return None
    if callable(location_map):
        return location_map
    return location_map.get


def parse_spool_map(src: Union[StrPath, TextIO]) -> Dict[str, str]:
    if isinstance(src, (os.PathLike, str)):
        with open(src) as spool_map_fp:
            spool_map_str = spool_map_fp.read()
    else:
        spool_map_str = src.read()

    spool_map = {}
    re_colon = re.compile(r'\s*:\s*')
    for line_str in re.split(r'\n+', spool_map_str):
        map_line = line_str.split('#', 1)[0].strip()
        if not map_line:
            continue
        if ':' not in map_line:
            # faulty line
            continue
        queue_id, location = re_colon.split(map_line, 1)
        if not (queue_id and location):
            continue
        spool_map[queue_id] = location
    return spool_map


def scan_spool_dirs(spool_basedir: StrPath, log, spool_names: Sequence[str]=POSTFIX_SPOOLS) -> Dict[str, str]:
    """
    Return a dict which maps queue ids to spool names by looking at the
    Postfix queue directory (e.g. "/var/spool/postfix").

    Postfix names every queue file after its queue id. Depending on
    "hash_queue_names" the files might be stored in subdirectories.
    The result is only a snapshot: Postfix might move messages at any time.
    """
    spool_map = {}
    for spool_name in spool_names:
        spool_path = os.path.join(spool_basedir, spool_name)
        if not os.path.isdir(spool_path):
            log.error('Spool directory %s does not exist.', spool_path)
            continue
        # os.walk() (used by "iter_find_files()") silently skips unreadable
        # directories. Postfix' queue directories are usually only
        # accessible for the "postfix" user.
        if not os.access(spool_path, os.R_OK | os.X_OK):
            log.warning('Spool directory %s is not readable (run as root/postfix user?).', spool_path)
            continue
        for file_path in iter_find_files(spool_path, '*'):
            queue_id = os.path.basename(file_path)
            spool_map[queue_id] = spool_name
    log.debug('found %d messages in spool directories', len(spool_map))
    return spool_map
