"""
Line-level pattern helpers for Perl source
"""

import re
from typing import List, Optional


# Blank lines and full-line comments
SKIP_LINE = re.compile(r'^\s*(#.*)?$')

# POD blocks open with any =directive and close with =cut
POD_START = re.compile(r'^=[A-Za-z]\w*')
POD_END = re.compile(r'^=cut\b')

# Everything after __END__ / __DATA__ is data, not code
END_MARKER = re.compile(r'^__(END|DATA)__\s*$')

# "sub name", optionally followed by an opening brace and/or a comment only
SUB_DECLARATION = re.compile(r'^\s*sub\s+(\w+)\s*(\{\s*)?(#.*)?$')

# Line-initial closing brace at column zero
BODY_END = re.compile(r'^\}')

# A word followed by '(' that is not a $scalar, @array or %hash
CALL_CANDIDATE = re.compile(r'(?<![$@%\w])(\w+)\s*\(')

# String literals and escaped characters, removed before counting braces
_ESCAPED_CHAR = re.compile(r'\\.')
_STRING_LITERAL = re.compile(r'"[^"]*"|\'[^\']*\'')
_TRAILING_COMMENT = re.compile(r'(?<!\$)#.*$')


def match_declaration(line: str) -> Optional[str]:
    """Return the subroutine name declared on this line, if any"""
    match = SUB_DECLARATION.match(line)
    return match.group(1) if match else None


def find_calls(line: str) -> List[str]:
    """Return every call candidate on the line, left to right"""
    return [match.group(1) for match in CALL_CANDIDATE.finditer(line)]


def strip_literals(line: str) -> str:
    """Remove escapes, quoted strings and trailing comments from a line"""
    code = _ESCAPED_CHAR.sub('', line)
    code = _STRING_LITERAL.sub('', code)
    return _TRAILING_COMMENT.sub('', code)


def brace_delta(line: str) -> int:
    """Net change in brace depth contributed by the line"""
    code = strip_literals(line)
    return code.count('{') - code.count('}')
