"""Names, emails, phone numbers, job titles and company names."""

from typing import Any

from fraiseql_synth import datasets
from fraiseql_synth.exceptions import GeneratorConfigError, UniqueCountExceededError
from fraiseql_synth.generators.base import AbstractGenerator
from fraiseql_synth.generators.numeric import CartesianIndexSampler, UniqueIntGenerator
from fraiseql_synth.utils import fill_template


def longest_length(values) -> int:
    return max(len(value) for value in values)


class DatasetGenerator(AbstractGenerator):
    """Uniform picks from a dataset tuple."""

    dataset: tuple[str, ...] = ()
    label = ""

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        self._check_string_length(self.label, longest_length(self.dataset))

    def generate(self, i: int = 0, **context: Any) -> Any:
        self._require_state()
        return self._pick(self.dataset)


class UniqueDatasetGenerator(AbstractGenerator):
    """Distinct picks from a dataset tuple."""

    dataset: tuple[str, ...] = ()
    label = ""
    is_generator_unique = True

    def get_max_unique_count(self) -> int | float:
        return len(self.dataset)

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        if count > len(self.dataset):
            raise UniqueCountExceededError(f"{self.label} values", len(self.dataset))
        self._check_string_length(self.label, longest_length(self.dataset))
        index_generator = UniqueIntGenerator(min_value=0, max_value=len(self.dataset) - 1)
        index_generator.init(count, seed)
        self.state["index_generator"] = index_generator

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        return self.dataset[state["index_generator"].generate()]


class UniqueFirstNameGenerator(UniqueDatasetGenerator):
    kind = "unique_first_name"
    dataset = datasets.FIRST_NAMES
    label = "first name"


class FirstNameGenerator(DatasetGenerator):
    kind = "first_name"
    unique_version = UniqueFirstNameGenerator
    dataset = datasets.FIRST_NAMES
    label = "first name"


class UniqueLastNameGenerator(UniqueDatasetGenerator):
    kind = "unique_last_name"
    dataset = datasets.LAST_NAMES
    label = "last name"


class LastNameGenerator(DatasetGenerator):
    kind = "last_name"
    unique_version = UniqueLastNameGenerator
    dataset = datasets.LAST_NAMES
    label = "last name"


FULL_NAME_MAX_LENGTH = longest_length(datasets.FIRST_NAMES) + longest_length(datasets.LAST_NAMES) + 1


class UniqueFullNameGenerator(AbstractGenerator):
    """Distinct ``First Last`` pairs decoded from a unique index."""

    kind = "unique_full_name"
    is_generator_unique = True

    def get_max_unique_count(self) -> int | float:
        return len(datasets.FIRST_NAMES) * len(datasets.LAST_NAMES)

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        max_count = self.get_max_unique_count()
        if count > max_count:
            raise UniqueCountExceededError("full names", max_count)
        self._check_string_length("full name", FULL_NAME_MAX_LENGTH)
        sampler = CartesianIndexSampler([[datasets.FIRST_NAMES, datasets.LAST_NAMES]])
        sampler.init(count, seed)
        self.state["sampler"] = sampler

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        _, (first_name, last_name) = state["sampler"].next(self._draw)
        return f"{first_name} {last_name}"


class FullNameGenerator(AbstractGenerator):
    kind = "full_name"
    unique_version = UniqueFullNameGenerator

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        self._check_string_length("full name", FULL_NAME_MAX_LENGTH)

    def generate(self, i: int = 0, **context: Any) -> Any:
        self._require_state()
        return f"{self._pick(datasets.FIRST_NAMES)} {self._pick(datasets.LAST_NAMES)}"


EMAIL_MAX_LENGTH = (
    longest_length(datasets.EMAIL_ADJECTIVES)
    + longest_length(datasets.FIRST_NAMES)
    + longest_length(datasets.EMAIL_DOMAINS)
    + 2
)


class EmailGenerator(AbstractGenerator):
    """
    Distinct ``adjective_firstname@domain`` addresses.

    Every email is unique by construction: the address is decoded from a
    unique index over adjectives x first names x domains.
    """

    kind = "email"
    is_generator_unique = True

    def get_max_unique_count(self) -> int | float:
        return len(datasets.EMAIL_ADJECTIVES) * len(datasets.FIRST_NAMES) * len(datasets.EMAIL_DOMAINS)

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        max_count = self.get_max_unique_count()
        if count > max_count:
            raise UniqueCountExceededError("emails", max_count)
        self._check_string_length("email", EMAIL_MAX_LENGTH)
        sampler = CartesianIndexSampler(
            [[datasets.EMAIL_ADJECTIVES, datasets.FIRST_NAMES, datasets.EMAIL_DOMAINS]]
        )
        sampler.init(count, seed)
        self.state["sampler"] = sampler

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        _, (adjective, first_name, domain) = state["sampler"].next(self._draw)
        return f"{adjective}_{first_name.lower()}@{domain}"


class JobTitleGenerator(DatasetGenerator):
    kind = "job_title"
    dataset = datasets.JOB_TITLES
    label = "job title"


class PhoneNumberGenerator(AbstractGenerator):
    """
    Distinct phone numbers.

    With ``template`` (e.g. ``"+1 (###) ###-####"``) every ``#`` is a digit.
    Otherwise numbers are ``prefix`` + ``digits`` random digits, using
    ``prefixes`` and ``generated_digits_numbers`` (an int for all prefixes or
    one per prefix), or the bundled prefix table.
    """

    kind = "phone_number"
    is_generator_unique = True

    def _prefixes(self) -> list[tuple[str, int]]:
        prefixes = self.params.get("prefixes")
        if prefixes is None:
            return list(datasets.PHONE_PREFIXES)

        digits = self.params.get("generated_digits_numbers", 7)
        if isinstance(digits, int):
            digits = [digits] * len(prefixes)
        if len(digits) != len(prefixes):
            raise GeneratorConfigError(
                "prefixes and generated_digits_numbers should have the same length."
            )
        if len(set(prefixes)) != len(prefixes):
            raise GeneratorConfigError("prefixes are not unique.")
        return list(zip(prefixes, digits))

    def get_max_unique_count(self) -> int | float:
        template = self.params.get("template")
        if template is not None:
            return 10 ** template.count("#")
        return sum(10**digits for _, digits in self._prefixes())

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        max_count = self.get_max_unique_count()
        if count > max_count:
            raise UniqueCountExceededError("phone numbers", max_count)

        template = self.params.get("template")
        if template is not None:
            self._check_string_length("phone number", len(template))
            index_generator = UniqueIntGenerator(min_value=0, max_value=max_count - 1)
            index_generator.init(count, seed)
            self.state.update(template=template, index_generator=index_generator)
            return

        prefixes = self._prefixes()
        self._check_string_length(
            "phone number", max(len(prefix) + digits for prefix, digits in prefixes)
        )
        generators = []
        for _, digits in prefixes:
            generator = UniqueIntGenerator(min_value=0, max_value=10**digits - 1, skip_check=True)
            generator.init(count, seed)
            generators.append(generator)
        self.state.update(template=None, prefixes=prefixes, generators=generators, generated=set())

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        template = state["template"]
        if template is not None:
            digits = str(state["index_generator"].generate())
            return fill_template(template, list(digits), template.count("#"), "0")

        prefixes = state["prefixes"]
        generators = state["generators"]
        while prefixes:
            position = self._draw(0, len(prefixes) - 1)
            number = generators[position].generate()
            if number is None:
                prefixes.pop(position)
                generators.pop(position)
                continue
            prefix, digits = prefixes[position]
            phone = f"{prefix}{number:0{digits}d}"
            # Overlapping prefixes can produce the same number twice.
            if phone in state["generated"]:
                continue
            state["generated"].add(phone)
            return phone
        raise UniqueCountExceededError("phone numbers")


COMPANY_TEMPLATES = ("#", "# - #", "# and #", "#, # and #")
COMPANY_NAME_MAX_LENGTH = max(
    longest_length(datasets.LAST_NAMES) + longest_length(datasets.COMPANY_SUFFIXES) + 1,
    3 * longest_length(datasets.LAST_NAMES) + 7,
)


def _company_name(template_index: int, tokens: list[str]) -> str:
    if template_index == 0:
        return " ".join(tokens)
    return fill_template(COMPANY_TEMPLATES[template_index], tokens)


def _company_pools() -> list[list[tuple[str, ...]]]:
    last_names = datasets.LAST_NAMES
    return [
        [last_names, datasets.COMPANY_SUFFIXES],
        [last_names, last_names],
        [last_names, last_names],
        [last_names, last_names, last_names],
    ]


class UniqueCompanyNameGenerator(AbstractGenerator):
    kind = "unique_company_name"
    is_generator_unique = True

    def get_max_unique_count(self) -> int | float:
        return CartesianIndexSampler(_company_pools()).max_count

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        sampler = CartesianIndexSampler(_company_pools())
        if count > sampler.max_count:
            raise UniqueCountExceededError("company names", sampler.max_count)
        self._check_string_length("company name", COMPANY_NAME_MAX_LENGTH)
        sampler.init(count, seed)
        self.state["sampler"] = sampler

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        template_index, tokens = state["sampler"].next(self._draw)
        return _company_name(template_index, tokens)


class CompanyNameGenerator(AbstractGenerator):
    """Company names like ``Smith LLC`` or ``Brown, Lee and Young``."""

    kind = "company_name"
    unique_version = UniqueCompanyNameGenerator

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        self._check_string_length("company name", COMPANY_NAME_MAX_LENGTH)

    def generate(self, i: int = 0, **context: Any) -> Any:
        self._require_state()
        template_index = self._draw(0, len(COMPANY_TEMPLATES) - 1)
        pool = _company_pools()[template_index]
        return _company_name(template_index, [self._pick(tokens) for tokens in pool])
