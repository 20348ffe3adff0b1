import re


CRLF = '\r\n'
FOLD_CHARS = ' \t'


def unfold(string, *, newline=CRLF):
    terminator = list(newline)
    width = len(terminator)
    chars = []

    for char in string:
        chars.append(char)

        # only the character just added can complete a fold marker, spliced ones included
        if char in FOLD_CHARS and chars[-width - 1:-1] == terminator:
            del chars[-width - 1:]

    return ''.join(chars)


def _build_separation_pattern(separator):
    assert len(separator) == 1

    char = re.escape(separator)
    return re.compile(rf'(?:[^\\{char}]|\\\\|\\{char}|\\)*')


def _split_structured_value(string, separation_pattern):
    parts = []
    prev_not_empty = False

    for match in separation_pattern.finditer(string):
        if match.start() == len(string) and not parts:
            break

        if match.start() == match.end():
            if not prev_not_empty:
                parts.append('')

            prev_not_empty = False
        else:
            prev_not_empty = True
            parts.append(match.group())

    return parts


def split_structured_value(string, separator):
    return _split_structured_value(string, _build_separation_pattern(separator))


def unescape(string):
    chars = []
    index = 0
    end = len(string)

    while index < end:
        char = string[index]
        index += 1

        if char == '\\' and index < end:
            next_char = string[index]
            index += 1

            if next_char in r'\,;:':
                chars.append(next_char)
            elif next_char in 'nN':
                chars.append('\n')
            else:
                chars.append(char)
                chars.append(next_char)
        else:
            chars.append(char)

    return ''.join(chars)


def remove_redundant_whitespaces(string):
    return re.sub(r'[\f\v\t ]+', ' ', string.strip())
