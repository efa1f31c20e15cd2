# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MIT

import configparser
import logging
import logging.config
import os
import sys
from pathlib import Path
from typing import Optional


__all__ = [
    'guess_config_path',
    'init_app',
]

def init_app(config_path, options=None, settings=None):
    if settings is None:
        settings = parse_config(config_path, section_name='mailq') if config_path else {}
    configure_logging(settings, options or {})
    return settings


def _no_section_headers(e):
    return isinstance(e, configparser.MissingSectionHeaderError)

def _contains_duplicate_section(e):
    return isinstance(e, configparser.DuplicateSectionError)

def _contains_duplicate_option(e):
    return isinstance(e, configparser.DuplicateOptionError)


def guess_config_path(cfg_path: Optional[str]) -> Optional[Path]:
    if cfg_path:
        return Path(cfg_path)

    candidates = [os.path.expanduser('~/.mailq-parser.conf')]
    if sys.platform == 'linux':
        candidates.append('/etc/mailq-parser.conf')
    for candidate in candidates:
        if os.path.exists(candidate):
            return Path(candidate)
    return None


def parse_config(config_path, section_name=None):
    if not config_path:
        sys.stderr.write('No config file found.\n')
        sys.exit(20)
    config_path = Path(config_path)
    filename = config_path.name
    if not config_path.exists():
        sys.stderr.write('config file "%s" not found.\n' % filename)
        sys.exit(20)

    parser = configparser.ConfigParser()
    exc_msg = None
    try:
        # `ConfigParser.read()` silently ignores errors (e.g. "permission denied").
        # Opening the config file first means we get an IOError with a more
        # helpful error message.
        with config_path.open('r') as config_fp:
            parser.read_file(config_fp)
        sections = (section_name, ) if section_name else parser.sections()
        for section in sections:
            parser.items(section)
    except IOError as io_exc:
        exc_msg = f'Unable to open config file "{config_path}" ({io_exc})'
    except configparser.NoSectionError:
        # reported below with a dedicated exit code
        pass
    except configparser.Error as e:
        line_detail = ''
        if hasattr(e, 'errors') and len(e.errors) > 0:
            line_nr, line_str = e.errors[0]
            line_detail = ' (line %d: "%s")' % (line_nr, line_str)
        if _no_section_headers(e):
            exc_msg = 'no section headers found: "[section]"'
        elif _contains_duplicate_section(e):
            exc_msg = 'duplicate section [%s]' % e.section
            line_detail = ' (line %d)' % e.lineno
        elif _contains_duplicate_option(e):
            exc_msg = 'duplicate option "%s" in [%s]' % (e.option, e.section)
            line_detail = ' (line %d)' % e.lineno
        else:
            exc_msg = 'invalid line'
        exc_msg = exc_msg + line_detail
    if exc_msg is not None:
        error_msg = 'File "%s" is not a valid config file:' % filename
        sys.stderr.write(error_msg + '\n')
        sys.stderr.write(exc_msg + '\n')
        sys.exit(21)

    if section_name:
        try:
            settings = parser.items(section_name)
        except configparser.NoSectionError:
            exc_msg = 'File "%s" has no section "[%s]"' % (filename, section_name)
            sys.stderr.write(exc_msg + '\n')
            sys.exit(22)
        return dict(settings)
    return parser


def configure_logging(settings, options):
    path_logging_config = settings.get('logging_config')
    basic_logging_configured = settings.get('basic_logging_configured', False)

    if path_logging_config:
        if not os.path.exists(path_logging_config):
            sys.stderr.write('No log configuration file "%s".\n' % path_logging_config)
            sys.exit(25)
        try:
            logging.config.fileConfig(path_logging_config)
        except Exception as e:
            sys.stderr.write('Malformed logging configuration file "%s": %s\n' % (path_logging_config, e))  # noqa: E501 (line-too-long)
            sys.exit(26)
    elif not basic_logging_configured:
        logging.basicConfig()

    verbose = options.get('verbose')
    quiet = options.get('quiet')
    ui_log_level = _ui_log_level(verbose, quiet)
    add_ui_logger(ui_log_level)


def _ui_log_level(verbose, quiet):
    if verbose and quiet:
        raise ValueError('Cannot use both "--verbose" and "--quiet".')
    if verbose:
        return logging.DEBUG
    elif quiet:
        return logging.FATAL
    else:
        return logging.INFO


class UIHandler(logging.StreamHandler):
    pass


def add_ui_logger(ui_log_level):
    # This logger is responsible for user output
    ui_handler = UIHandler(sys.stderr)
    # the "handler" log level takes priority over so you might think that just
    # setting "DEBUG" here would be enough to implement "--verbose".
    # That is not enough, so we need to set the level also on the logger (see below).
    ui_handler.setLevel(ui_log_level)
    ui_handler.setFormatter(logging.Formatter('%(message)s'))
    mailq_logger = logging.getLogger('mailq')
    # If not we don't set a level for the "mailq" logger all other loggers
    # will inherit the root logger's log level (which is WARNING by default).
    # That will suppress a lot of log messages.
    mailq_logger.setLevel(ui_log_level)
    # only one UI handler even if the app is initialized repeatedly
    for handler in list(mailq_logger.handlers):
        if isinstance(handler, UIHandler):
            mailq_logger.removeHandler(handler)
    mailq_logger.addHandler(ui_handler)
    # messages from the "mailq" handler should typically not bubble up to
    # the root logger (this might lead to duplicate lines shown to the user,
    # e.g. in case of errors).
    mailq_logger.propagate = False
