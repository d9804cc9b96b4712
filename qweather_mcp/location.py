"""ABOUTME: Location resolution - transliteration and geocoding of location tokens.

A token is classified structurally: coordinate pairs and tokens without native
script are looked up as given; tokens containing Han characters are first
romanized with pypinyin. Resolution never raises; failures come back as a
ResolutionFailure that names the attempted tokens and the cause.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional, Union

from pypinyin import Style, lazy_pinyin

from .client import QWeatherClient
from .common.error_handling import CODE_NOT_AVAILABLE, ErrorKind, QWeatherError
from .common.validation import contains_native_script, is_coordinate_pair
from .models import Location

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


def to_pinyin(text: str) -> str:
    """Romanize Han characters: first reading per character, lowercase, no spaces.

    Example:
        to_pinyin("北京") -> "beijing"
    """
    syllables = lazy_pinyin(text, style=Style.NORMAL)
    return _WHITESPACE.sub("", "".join(syllables)).lower()


@dataclass(frozen=True)
class LocationQuery:
    """A caller token and the form actually sent to the provider."""

    original: str
    lookup_token: str
    transliterated: bool = False

    @property
    def display(self) -> str:
        """Name used in rendered text, e.g. "北京 (beijing)"."""
        if self.transliterated:
            return f"{self.original} ({self.lookup_token})"
        return self.original


@dataclass(frozen=True)
class ResolutionFailure:
    """Why a token could not be resolved to a provider location."""

    query: LocationQuery
    kind: ErrorKind
    cause: str
    code: str = CODE_NOT_AVAILABLE


Resolution = Union[Location, ResolutionFailure]


class LocationResolver:
    """Turns location tokens into provider location records."""

    def __init__(
        self,
        client: QWeatherClient,
        transliterate: bool = True,
        transliterator: Optional[Callable[[str], str]] = None,
    ):
        """
        Args:
            client: QWeather client used for the city lookup
            transliterate: Romanize native-script tokens before lookup
            transliterator: Replacement for to_pinyin (optional)
        """
        self.client = client
        self.transliterate = transliterate
        self.transliterator = transliterator or to_pinyin

    def prepare(self, token: str, transliterate: Optional[bool] = None) -> LocationQuery:
        """Classify a token and compute the form to send to the provider.

        Args:
            token: Caller-supplied location token
            transliterate: Override the resolver default for this token (optional)
        """
        if transliterate is None:
            transliterate = self.transliterate

        if is_coordinate_pair(token):
            return LocationQuery(original=token, lookup_token=token)

        if transliterate and contains_native_script(token):
            romanized = self.transliterator(token)
            logger.info(f"Transliterated '{token}' to '{romanized}'")
            return LocationQuery(original=token, lookup_token=romanized, transliterated=True)

        return LocationQuery(original=token, lookup_token=token)

    async def resolve(self, query: LocationQuery) -> Resolution:
        """Geocode a prepared query and take the first (highest ranked) candidate."""
        logger.debug(f"Resolving location '{query.lookup_token}' (original '{query.original}')")

        try:
            candidates = await self.client.lookup_city(query.lookup_token)
        except QWeatherError as e:
            logger.warning(f"City lookup failed for '{query.lookup_token}': [{e.kind.value}] {e.message}")
            return ResolutionFailure(query=query, kind=e.kind, cause=e.message, code=e.code)

        if not candidates:
            logger.warning(f"City lookup returned no candidates for '{query.lookup_token}'")
            return ResolutionFailure(
                query=query,
                kind=ErrorKind.PROVIDER,
                cause="No matching location was found",
                code="200",
            )

        location = candidates[0]
        logger.info(f"Resolved '{query.display}' to {location.name} (ID {location.id})")
        return location

    async def resolve_token(self, token: str, transliterate: Optional[bool] = None) -> Resolution:
        """prepare() then resolve()."""
        return await self.resolve(self.prepare(token, transliterate=transliterate))
