import logging

from vcardparse.text import CRLF, split_structured_value


logger = logging.getLogger(__name__)

BEGIN_MARKER = 'BEGIN:VCARD'
VERSION_MARKER = 'VERSION:3.0'
END_MARKER = 'END:VCARD'
END_KEYWORD = 'END'

SUPPORTED_VERSION = '3.0'
DEFAULT_PARAMETER = 'TYPE'


class ParseError(ValueError):
    """Base class of every parse failure.

    ``line_number`` is the 1-based logical line in the unfolded text and
    ``offset`` the character offset into it where parsing stopped.
    """

    description = 'parse error'

    def __init__(self, line_number, offset=None, detail=None):
        self.line_number = line_number
        self.offset = offset
        self.detail = detail

        message = f'line {line_number}: {self.description}'

        if detail:
            message = f'{message} ({detail})'

        super().__init__(message)

    @property
    def kind(self):
        return type(self).__name__


class MissingBegin(ParseError):
    description = f'missing {BEGIN_MARKER}'


class UnsupportedOrMissingVersion(ParseError):
    description = f'missing or unsupported version, expected {VERSION_MARKER}'


class ReservedName(ParseError):
    description = f'reserved property name {END_KEYWORD}'


class UnterminatedPropertyHeader(ParseError):
    description = 'unterminated property header'


class EmptyPropertyName(ParseError):
    description = 'empty property name'


class EmptyPropertyList(ParseError):
    description = 'no properties between VERSION and END'


class MissingEnd(ParseError):
    description = f'missing {END_MARKER}'


class Record:
    def __init__(self, name, *, group=None, parameters=None, values=None, line_number=None):
        self.group = group
        self.name = name
        self.parameters = list(parameters or [])
        self.values = list(values) if values else ['']
        self.line_number = line_number

    @property
    def value(self):
        return ','.join(self.values)

    def matches(self, name):
        return self.name.upper() == name.upper()

    def add_parameter(self, key, value):
        self.parameters.append((key, value))

    def get_parameter(self, key):
        key = key.upper()
        return [value for name, value in self.parameters if name.upper() == key]

    def __eq__(self, other):
        if not isinstance(other, Record):
            return NotImplemented

        return (self.group, self.name, self.parameters, self.values) == \
            (other.group, other.name, other.parameters, other.values)

    def __repr__(self):
        return f'Record(group={self.group!r}, name={self.name!r}, ' \
               f'parameters={self.parameters!r}, values={self.values!r})'


class Document:
    version = SUPPORTED_VERSION

    def __init__(self, records, *, start_line=1, end_line=None, end_offset=None):
        self.records = list(records)
        self.start_line = start_line
        self.end_line = end_line
        self.end_offset = end_offset

    def get(self, name):
        return [record for record in self.records if record.matches(name)]

    def __len__(self):
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    def __getitem__(self, index):
        return self.records[index]

    def __repr__(self):
        return f'Document({self.records!r})'


def _find_unescaped(string, chars, start=0):
    index = start
    stop = len(string)

    while index < stop:
        char = string[index]

        if char == '\\':
            index += 2
            continue

        if char in chars:
            return index

        index += 1

    return -1


def _split_name_token(line):
    delimiter_index = _find_unescaped(line, ';:')
    token = line if delimiter_index == -1 else line[:delimiter_index]
    group, _, name = token.rpartition('.')

    return delimiter_index, group or None, name


def _is_reserved(name):
    return name.upper() == END_KEYWORD


def parse_property(line, line_number=1, offset=0):
    """Parse one unfolded property line, without its terminator."""
    delimiter_index, group, name = _split_name_token(line)

    if _is_reserved(name):
        raise ReservedName(line_number, offset)

    if delimiter_index == -1:
        raise UnterminatedPropertyHeader(line_number, offset + len(line))

    if not name:
        raise EmptyPropertyName(line_number, offset + delimiter_index)

    record = Record(name, group=group, line_number=line_number)
    index = delimiter_index

    while line[index] == ';':
        start = index + 1
        index = _find_unescaped(line, ';:', start)

        if index == -1:
            raise UnterminatedPropertyHeader(line_number, offset + len(line), f'parameters of {name}')

        section = line[start:index]

        if not section:
            continue

        key, separator, value = section.partition('=')

        if not separator:
            key, value = DEFAULT_PARAMETER, section

        record.add_parameter(key, value)

    record.values = split_structured_value(line[index + 1:], ',') or ['']

    return record


class _LineScanner:
    def __init__(self, text, newline):
        self.text = text
        self.newline = newline
        self.position = 0
        self.line_number = 0

    def at_end(self):
        return self.position >= len(self.text)

    def peekline(self):
        stop = self.text.find(self.newline, self.position)

        if stop == -1:
            return self.text[self.position:], False

        return self.text[self.position:stop], True

    def readline(self):
        line, terminated = self.peekline()
        self.position += len(line)

        if terminated:
            self.position += len(self.newline)

        self.line_number += 1

        return line, terminated


def _expect_marker(scanner, marker, error_class):
    line, terminated = scanner.peekline()

    if not terminated or line.upper() != marker:
        raise error_class(scanner.line_number + 1, scanner.position, f'got {line[:40]!r}')

    scanner.readline()


def _read_document(scanner):
    start_line = scanner.line_number + 1

    _expect_marker(scanner, BEGIN_MARKER, MissingBegin)
    _expect_marker(scanner, VERSION_MARKER, UnsupportedOrMissingVersion)

    records = []

    while True:
        if scanner.at_end():
            raise MissingEnd(scanner.line_number + 1, scanner.position, 'end of input')

        line, terminated = scanner.peekline()
        line_number = scanner.line_number + 1
        delimiter_index, group, name = _split_name_token(line)

        # a grouped or parameterised END is a property line and fails as one
        if _is_reserved(name) and group is None and delimiter_index != -1 and line[delimiter_index] == ':':
            break

        record = parse_property(line, line_number, scanner.position)

        if not terminated:
            raise MissingEnd(line_number + 1, len(scanner.text), 'end of input')

        records.append(record)
        scanner.readline()

    if not records:
        raise EmptyPropertyList(scanner.line_number + 1, scanner.position)

    _expect_marker(scanner, END_MARKER, MissingEnd)

    logger.debug('parsed card at lines %d-%d with %d properties', start_line, scanner.line_number, len(records))

    return Document(records, start_line=start_line, end_line=scanner.line_number, end_offset=scanner.position)


def parse(text, *, newline=CRLF):
    """Parse the first card of already unfolded ``text``.

    Text after the closing terminator is left unread; its position is
    ``Document.end_offset``.
    """
    return _read_document(_LineScanner(text, newline))


def iter_documents(text, *, newline=CRLF):
    scanner = _LineScanner(text, newline)

    while not scanner.at_end():
        yield _read_document(scanner)


def parse_many(text, *, newline=CRLF):
    return list(iter_documents(text, newline=newline))
