import logging

from urlshortener.core.exceptions import GenerationExhaustedError
from urlshortener.db.repository import MappingRepository
from urlshortener.utils.encoding import SHORT_CODE_LENGTH, derive_short_code, new_nonce

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5


class ShortCodeGenerator:
    """Derive short code candidates from a URL and a fresh nonce per attempt.

    The output is deliberately not deterministic: the same URL yields a new
    candidate on every call. "Same URL, same code" is provided by the cache
    and store lookups that run before generation.
    """

    def __init__(
        self,
        store: MappingRepository,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        length: int = SHORT_CODE_LENGTH,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1 (given value: {max_attempts})")
        self.store = store
        self.max_attempts = max_attempts
        self.length = length

    def generate(self, normalized_url: str) -> str:
        for attempt in range(1, self.max_attempts + 1):
            code = derive_short_code(normalized_url, new_nonce(), self.length)
            if code and not self.store.exists_by_short_code(code):
                logger.debug(f"Generated short code {code} on attempt {attempt}/{self.max_attempts}")
                return code
            logger.info(f"Short code collision on attempt {attempt}/{self.max_attempts}")

        logger.error(f"Failed to generate unique short code after {self.max_attempts} attempts")
        raise GenerationExhaustedError(
            f"Failed to generate unique short code after {self.max_attempts} attempts"
        )
