import logging

from vcardparse.text import split_structured_value, unescape, remove_redundant_whitespaces


logger = logging.getLogger(__name__)

NAME_COMPONENTS = 5

# properties whose comma separated values are distinct items, everything else is free text
_list_properties = {'CATEGORIES', 'NICKNAME'}


class Name:
    def __init__(self, family='', given='', additional='', prefix='', suffix=''):
        self.family = family
        self.given = given
        self.additional = additional
        self.prefix = prefix
        self.suffix = suffix

    def __str__(self):
        parts = [self.prefix, self.given, self.additional, self.family, self.suffix]
        return ' '.join(filter(None, parts))

    def __repr__(self):
        return f'Name(family={self.family!r}, given={self.given!r}, additional={self.additional!r}, ' \
               f'prefix={self.prefix!r}, suffix={self.suffix!r})'


class Contact:
    def __init__(self, full_name='', name=None, document=None):
        self.full_name = full_name
        self.name = name
        self.document = document


def parse_name(value):
    processors = [unescape, remove_redundant_whitespaces]
    components = []

    for component in split_structured_value(value, ';')[:NAME_COMPONENTS]:
        for processor in processors:
            component = processor(component)

        components.append(component)

    if len(components) < NAME_COMPONENTS:
        components += [''] * (NAME_COMPONENTS - len(components))

    return Name(*components)


def property_values(record):
    """Return the values of ``record`` as its property type reads them.

    The parser splits every value on commas; only list typed properties keep
    that split, the others are joined back into one free text value.
    """
    if record.name.upper() in _list_properties:
        return [unescape(value) for value in record.values]

    return [unescape(record.value)]


def contact_from_document(document):
    contact = Contact(document=document)

    full_names = document.get('FN')

    if full_names:
        contact.full_name = remove_redundant_whitespaces(unescape(full_names[0].value))
    else:
        logger.debug('no FN property in card at line %d', document.start_line)

    names = document.get('N')

    if names:
        contact.name = parse_name(names[0].value)
    else:
        logger.debug('no N property in card at line %d', document.start_line)

    return contact
