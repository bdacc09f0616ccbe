from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Mapping

import requests

from .models import Chapter, EditionPair, MalformedResponseError, parse_edition

logger = logging.getLogger(__name__)

QURAN_API_BASE = "https://api.alquran.cloud/v1"
ARABIC_EDITION = "quran-uthmani"
ENGLISH_EDITION = "en.sahih"
API_ARABIC = f"{QURAN_API_BASE}/quran/{ARABIC_EDITION}"
API_ENGLISH = f"{QURAN_API_BASE}/quran/{ENGLISH_EDITION}"

PRAYER_API_BASE = "https://api.aladhan.com/v1"
# University of Islamic Sciences, Karachi.
PRAYER_METHOD = 1


class UpstreamFetchError(ConnectionError):
    """Raised when a remote API is unreachable or answers with a non-success status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def get_json(session: requests.Session, url: str, *, params=None, timeout: float) -> object:
    try:
        response = session.get(url, params=params, timeout=timeout)
    except requests.RequestException as exc:
        raise UpstreamFetchError(f"Failed to contact {url}") from exc
    if response.status_code != 200:
        raise UpstreamFetchError(
            f"{url} failed with status {response.status_code}",
            status_code=response.status_code,
        )
    try:
        return response.json()
    except (json.JSONDecodeError, ValueError) as exc:
        raise MalformedResponseError(f"{url} returned invalid JSON") from exc


def _data_field(payload: object, url: str) -> Mapping[str, object]:
    if not isinstance(payload, Mapping):
        raise MalformedResponseError(f"{url} returned a non-object payload")
    data = payload.get("data")
    if not isinstance(data, Mapping):
        raise MalformedResponseError(f"{url} payload has no 'data' object")
    return data


class QuranCloudClient:
    """
    Thin wrapper around the alquran.cloud editions API.
    """

    def __init__(
        self,
        arabic_url: str = API_ARABIC,
        english_url: str = API_ENGLISH,
        timeout: float = 30.0,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self.arabic_url = arabic_url
        self.english_url = english_url
        self.timeout = timeout
        self._session = session or requests.Session()

    def fetch_edition(self, url: str) -> list[Chapter]:
        payload = get_json(self._session, url, timeout=self.timeout)
        data = _data_field(payload, url)
        return parse_edition(data.get("surahs"))

    def fetch_arabic(self) -> list[Chapter]:
        return self.fetch_edition(self.arabic_url)

    def fetch_english(self) -> list[Chapter]:
        return self.fetch_edition(self.english_url)

    def fetch_full_dataset(self) -> EditionPair:
        logger.info("Fetching scripture editions from %s", QURAN_API_BASE)
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="ruhverse-fetch") as pool:
            arabic_future = pool.submit(self.fetch_arabic)
            english_future = pool.submit(self.fetch_english)
            errors: list[str] = []
            editions: list[list[Chapter]] = []
            first_exc: Exception | None = None
            for label, future in (("ar", arabic_future), ("en", english_future)):
                try:
                    editions.append(future.result())
                except (UpstreamFetchError, MalformedResponseError) as exc:
                    status = getattr(exc, "status_code", None)
                    errors.append(f"{label}={status if status is not None else exc}")
                    first_exc = first_exc or exc
        if first_exc is not None:
            if isinstance(first_exc, MalformedResponseError):
                raise MalformedResponseError(
                    f"Quran API returned malformed data: {', '.join(errors)}"
                ) from first_exc
            raise UpstreamFetchError(
                f"Quran API failed: {', '.join(errors)}"
            ) from first_exc
        return EditionPair.from_editions(editions[0], editions[1])

    def close(self) -> None:
        self._session.close()


class PrayerTimesClient:
    """
    Thin wrapper around the Aladhan timings API.
    """

    def __init__(
        self,
        base_url: str = PRAYER_API_BASE,
        timeout: float = 15.0,
        *,
        method: int = PRAYER_METHOD,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.method = method
        self._session = session or requests.Session()

    def _timings(self, url: str, params: dict[str, object]) -> dict[str, str]:
        payload = get_json(self._session, url, params=params, timeout=self.timeout)
        if not isinstance(payload, Mapping) or payload.get("code") != 200:
            code = payload.get("code") if isinstance(payload, Mapping) else None
            raise UpstreamFetchError(
                f"{url} answered with code {code}",
                status_code=code if isinstance(code, int) else None,
            )
        data = _data_field(payload, url)
        timings = data.get("timings")
        if not isinstance(timings, Mapping):
            raise MalformedResponseError(f"{url} payload has no timings")
        return {str(key): str(value) for key, value in timings.items()}

    def timings(self, latitude: float, longitude: float, day: date | None = None) -> dict[str, str]:
        day = day or date.today()
        url = f"{self.base_url}/timings/{day.strftime('%d-%m-%Y')}"
        return self._timings(
            url,
            {"latitude": latitude, "longitude": longitude, "method": self.method},
        )

    def timings_by_city(self, city: str, country: str = "") -> dict[str, str]:
        clean = city.strip()
        if not clean:
            raise ValueError("city must not be empty")
        url = f"{self.base_url}/timingsByCity"
        return self._timings(
            url,
            {"city": clean, "country": country, "method": self.method},
        )

    def close(self) -> None:
        self._session.close()
