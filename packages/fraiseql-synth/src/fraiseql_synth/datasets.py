"""
Word lists used by the dataset-backed generators.

All lists are taken from Faker's bundled ``en_US`` providers, deduplicated
with their order preserved. Order matters: unique generators index into
these tuples, so reordering them changes generated data.
"""

from faker.providers.address import Provider as AddressProvider
from faker.providers.address.en_US import Provider as UsAddressProvider
from faker.providers.company.en_US import Provider as UsCompanyProvider
from faker.providers.internet import Provider as InternetProvider
from faker.providers.job.en_US import Provider as UsJobProvider
from faker.providers.lorem.en_US import Provider as UsLoremProvider
from faker.providers.lorem.la import Provider as LatinLoremProvider
from faker.providers.person.en_US import Provider as UsPersonProvider


def _unique(values) -> tuple[str, ...]:
    return tuple(dict.fromkeys(values))


FIRST_NAMES = _unique(UsPersonProvider.first_names)
LAST_NAMES = _unique(UsPersonProvider.last_names)

COUNTRIES = _unique(AddressProvider.countries)
CITY_PREFIXES = _unique(UsAddressProvider.city_prefixes)
CITY_SUFFIXES = _unique(UsAddressProvider.city_suffixes)
STREET_SUFFIXES = _unique(UsAddressProvider.street_suffixes)
STATES = _unique(UsAddressProvider.states)
POSTCODE_FORMATS = _unique(UsAddressProvider.postcode_formats)

JOB_TITLES = _unique(UsJobProvider.jobs)
COMPANY_SUFFIXES = _unique(UsCompanyProvider.company_suffixes)

EMAIL_ADJECTIVES = _unique(
    word.replace(" ", "_").replace("-", "_")
    for word in UsLoremProvider.parts_of_speech["adjective"]
)
EMAIL_DOMAINS = _unique(
    tuple(InternetProvider.free_email_domains) + tuple(InternetProvider.safe_domain_names)
)

LOREM_WORDS = _unique(LatinLoremProvider.word_list)

# (prefix, digits after the prefix)
PHONE_PREFIXES: tuple[tuple[str, int], ...] = (
    ("+1 201", 7),
    ("+1 212", 7),
    ("+1 305", 7),
    ("+1 415", 7),
    ("+1 617", 7),
    ("+1 702", 7),
    ("+44 20", 8),
    ("+44 161", 7),
    ("+33 1", 8),
    ("+33 6", 8),
    ("+49 30", 8),
    ("+49 89", 8),
    ("+34 91", 7),
    ("+39 06", 8),
    ("+31 20", 7),
    ("+46 8", 7),
    ("+61 2", 8),
    ("+81 3", 8),
    ("+55 11", 8),
    ("+380 44", 7),
)
