import logging

from vcardparse.contact import contact_from_document
from vcardparse.core import parse_many
from vcardparse.text import CRLF, unfold


_handler = logging.StreamHandler()
_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

logger = logging.getLogger(__name__)
logger.setLevel(logging.DEBUG)
logger.addHandler(_handler)


def format_record(record):
    parts = []

    if record.group:
        parts.append(f'{record.group}.')

    parts.append(record.name.upper())

    for key, value in record.parameters:
        parts.append(f';{key.upper()}={value}')

    parts.append(': ')
    parts.append(' | '.join(record.values))

    return ''.join(parts)


def format_contact(contact):
    lines = [f'  full name: {contact.full_name}']

    if contact.name:
        lines.append(f'  family name: {contact.name.family}')
        lines.append(f'  given name: {contact.name.given}')

        if contact.name.additional:
            lines.append(f'  additional names: {contact.name.additional}')

        if contact.name.prefix:
            lines.append(f'  prefix: {contact.name.prefix}')

        if contact.name.suffix:
            lines.append(f'  suffix: {contact.name.suffix}')

    return '\n'.join(lines)


def dump_stream(input_stream, output_stream, *, newline=CRLF, contacts=False):
    text = unfold(input_stream.read(), newline=newline)

    # a broken card anywhere in the file means nothing from it is written
    documents = parse_many(text, newline=newline)

    for count, document in enumerate(documents, 1):
        output_stream.write(f'card {count} (lines {document.start_line}-{document.end_line})\n')

        if contacts:
            output_stream.write(format_contact(contact_from_document(document)))
            output_stream.write('\n')
            continue

        for record in document:
            output_stream.write(f'  {format_record(record)}\n')

    return len(documents)


def main(argv=None):
    import os
    import glob
    import sys
    import argparse

    parser = argparse.ArgumentParser(description='parse vcard 3.0 files and dump their properties.')
    parser.add_argument('-i', dest='input_files', action='append', required=True, metavar='INPUT',
                        help='specify input vcard 3.0 files. supports wildcards.')
    parser.add_argument('-o', dest='output_path', metavar='OUTPUT',
                        help='specify output file. defaults to standard output.')
    parser.add_argument('--lf', dest='newline', action='store_const', const='\n', default=CRLF,
                        help='input lines end with LF instead of CRLF.')
    parser.add_argument('--contacts', action='store_true',
                        help='dump the name of each contact instead of its properties.')
    parser.add_argument('-v', dest='verbose', action='store_true',
                        help='log parser details.')
    args = parser.parse_args(argv)

    if args.verbose:
        library_logger = logging.getLogger('vcardparse')
        library_logger.setLevel(logging.DEBUG)
        library_logger.addHandler(_handler)

    input_files = set()

    for pathname in args.input_files:
        if glob.has_magic(pathname):
            for p in glob.glob(pathname, recursive=True):
                if os.path.isfile(p):
                    input_files.add(p)
        else:
            if not os.path.exists(pathname):
                parser.exit(-1, f'"{pathname}" does not exist.\n')

            if not os.path.isfile(pathname):
                parser.exit(-1, f'"{pathname}" is not a file.\n')

            input_files.add(pathname)

    if not input_files:
        parser.exit(0)

    if args.output_path:
        if os.path.isdir(args.output_path):
            parser.exit(-1, 'output path must be a file.\n')

        try:
            output_stream = open(args.output_path, 'w', encoding='utf-8')
        except OSError as exc:
            parser.exit(-1, f'"{args.output_path}": {exc}\n')
    else:
        output_stream = sys.stdout

    errors = 0

    for input_pathname in sorted(input_files):
        try:
            input_stream = open(input_pathname, 'r', encoding='utf-8', newline='')
        except OSError as exc:
            logger.error(f'"{input_pathname}": {exc}')
            errors += 1
            continue

        logger.info('dumping "%s"', input_pathname)

        with input_stream:
            try:
                count = dump_stream(input_stream, output_stream, newline=args.newline, contacts=args.contacts)
            except ValueError as exc:
                logger.error(f'"{input_pathname}": {exc}')
                errors += 1
                continue

        logger.info('dumped %d cards from "%s"', count, input_pathname)

    if output_stream is not sys.stdout:
        output_stream.close()

    sys.exit(errors)


if __name__ == '__main__':
    main()
