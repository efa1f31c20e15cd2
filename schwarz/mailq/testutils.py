# -*- coding: utf-8 -*-
# SPDX-License-Identifier: MIT

__all__ = [
    'assert_did_log_message',
    'build_block',
    'build_mailq_output',
    'create_ini',
    'MAILQ_HEADER',
]

MAILQ_HEADER = '-Queue ID-  --Size-- ----Arrival Time---- -Sender/Recipient-------'

def build_block(queue_id='061A5B062E', flag='', size=1300, date='Fri Oct 17 12:39:22',
                sender='xavier@example.es', recipients=('foo@site.example',), error=None):
    header_line = '%s%s %9d %s  %s' % (queue_id, flag, size, date, sender)
    lines = [header_line]
    if error:
        lines.append(error)
    for recipient in recipients:
        lines.append(' ' * 41 + recipient)
    return '\n'.join(lines) + '\n'


def build_mailq_output(*blocks, summary=True):
    if not blocks:
        return 'Mail queue is empty\n'
    output = MAILQ_HEADER + '\n' + '\n'.join(blocks)
    if summary:
        total_kbytes = 1 + sum(len(block) for block in blocks) // 1024
        output += '\n-- %d Kbytes in %d Requests.\n' % (total_kbytes, len(blocks))
    return output


def create_ini(dir_path, **settings):
    config_lines = ['[mailq]']
    for key, value in settings.items():
        config_lines.append('%s = %s' % (key, value))
    config_path = dir_path / 'mailq-parser.ini'
    config_path.write_text('\n'.join(config_lines) + '\n')
    return str(config_path)



# --- helpers to check logged messages ----------------------------------------
def assert_did_log_message(log_capture, expected_msg, level=None):
    """Raise an AssertionError unless a record with the (unformatted)
    message "expected_msg" was captured, optionally at the given level
    name (e.g. "WARNING")."""
    logged = [(lr.levelname, lr.msg) for lr in log_capture.records]
    if not logged:
        raise AssertionError('no messages logged')
    for levelname, msg in logged:
        if (msg == expected_msg) and (level in (None, levelname)):
            return
    raise AssertionError('message not logged: "%s" - did log %s' % (expected_msg, logged))
