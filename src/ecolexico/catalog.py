import glob
import logging
import os
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import pandas as pd
import requests
from pydantic import ValidationError

from .errors import CatalogFetchError
from .models import WordEntry

logger = logging.getLogger(__name__)


class CatalogSource(ABC):
    """Where the trivia game gets its words from."""

    @abstractmethod
    def fetch_word_catalog(self, region: Optional[str] = None) -> List[WordEntry]:
        pass

    @abstractmethod
    def get_regions(self) -> List[Dict[str, Any]]:
        pass


# Region keys look like "<region_id>_<name>", e.g. "1_costa"
REGION_FILE_PATTERN = re.compile(r"^(?P<id>\d+)_(?P<slug>.+)$")


# --- Remote catalog API ---
class HttpCatalogSource(CatalogSource):
    """Reads ``GET {base_url}/api/words`` from the site's backend.

    The backend returns every word; regions are filtered here on
    ``region_id``, as the site's region pages do.
    """

    REGION_NAMES: Dict[int, str] = {1: "costa", 2: "sierra", 3: "oriente"}

    def __init__(self, base_url: str, token: str = "", timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def region_id(self, region: str) -> int:
        """Accepts "1_costa", "1" or "costa"."""
        match = REGION_FILE_PATTERN.match(region)
        if match:
            return int(match.group("id"))
        if region.isdigit():
            return int(region)
        for region_id, name in self.REGION_NAMES.items():
            if name == region.lower():
                return region_id
        raise CatalogFetchError(f"Unknown region {region!r}")

    def _fetch_all(self) -> List[WordEntry]:
        url = f"{self.base_url}/api/words"
        try:
            response = requests.get(url, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as exc:
            raise CatalogFetchError(f"Failed to reach word catalog: {exc}") from exc

        if response.status_code == 401:
            raise CatalogFetchError("Word catalog rejected the token (401)")
        if response.status_code >= 400:
            raise CatalogFetchError(
                f"Word catalog answered HTTP {response.status_code}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise CatalogFetchError("Word catalog sent invalid JSON") from exc
        if not isinstance(payload, list):
            raise CatalogFetchError("Word catalog did not return a list")

        try:
            words = [WordEntry.model_validate(item) for item in payload]
        except ValidationError as exc:
            raise CatalogFetchError(f"Malformed word in catalog: {exc}") from exc
        logger.info(f"Fetched {len(words)} words from {url}")
        return words

    def fetch_word_catalog(self, region: Optional[str] = None) -> List[WordEntry]:
        if region is None:
            return self._fetch_all()
        region_id = self.region_id(region)
        return [word for word in self._fetch_all() if word.region_id == region_id]

    def get_regions(self) -> List[Dict[str, Any]]:
        counts: Dict[int, int] = {region_id: 0 for region_id in self.REGION_NAMES}
        for word in self._fetch_all():
            if word.region_id is not None:
                counts[word.region_id] = counts.get(word.region_id, 0) + 1

        regions = []
        for region_id, count in counts.items():
            slug = self.REGION_NAMES.get(region_id, f"region_{region_id}")
            regions.append(
                {
                    "id": f"{region_id}_{slug}",
                    "region_id": region_id,
                    "name": slug.replace("_", " ").title(),
                    "count": count,
                }
            )
        regions.sort(key=lambda x: x["name"])
        return regions


# --- Local CSV vocabulary ---
DUMMY_WORDS: List[Dict[str, Any]] = [
    {"id": 1, "term": "Ñaño", "meaning": "Brother or close friend", "region_id": 2},
    {"id": 2, "term": "Chuchaqui", "meaning": "Hangover", "region_id": 2},
    {"id": 3, "term": "Guagua", "meaning": "Baby or small child", "region_id": 2},
    {"id": 4, "term": "Chévere", "meaning": "Cool, great", "region_id": 1},
    {"id": 5, "term": "Pana", "meaning": "Buddy, friend", "region_id": 1},
    {"id": 6, "term": "Achachay", "meaning": "Expression for feeling cold", "region_id": 2},
]


class VocabularyManager(CatalogSource):
    """Loads one CSV per region from a directory.

    Files are named ``<region_id>_<name>.csv`` and carry the columns
    ``id, term, meaning`` plus an optional ``audio_url``.
    """

    REQUIRED_COLUMNS = ("id", "term", "meaning")

    def __init__(self, directory: str):
        self.directory = directory
        self.regions: Dict[str, List[WordEntry]] = {}
        self.region_ids: Dict[str, Optional[int]] = {}
        self.load_all()

    def load_all(self):
        self.regions = {}
        self.region_ids = {}
        if not os.path.exists(self.directory):
            os.makedirs(self.directory)
            logger.warning(f"Created directory {self.directory}. Please add CSV files.")

        csv_files = sorted(glob.glob(os.path.join(self.directory, "*.csv")))
        for file_path in csv_files:
            file_name = os.path.splitext(os.path.basename(file_path))[0]
            match = REGION_FILE_PATTERN.match(file_name)
            region_id = int(match.group("id")) if match else None
            try:
                df = pd.read_csv(file_path, encoding="utf-8")
            except (OSError, ValueError) as e:
                logger.error(f"Failed to load {file_path}: {e}")
                continue
            if not all(column in df.columns for column in self.REQUIRED_COLUMNS):
                logger.error(f"Skipping {file_name}: Missing columns.")
                continue

            df = df.dropna(subset=list(self.REQUIRED_COLUMNS))
            df = df.astype(object).where(pd.notna(df), None)
            try:
                words = [
                    WordEntry(
                        id=int(row["id"]),
                        term=str(row["term"]),
                        meaning=str(row["meaning"]),
                        audio_url=row.get("audio_url"),
                        region_id=region_id,
                    )
                    for row in df.to_dict("records")
                ]
            except (TypeError, ValueError) as e:
                logger.error(f"Skipping {file_name}: {e}")
                continue
            self.regions[file_name] = words
            self.region_ids[file_name] = region_id
            logger.info(f"Loaded {len(words)} words from {file_name}")

        if not self.regions:
            logger.warning("No CSV files found. Loading dummy data.")
            self.regions["default_dummy"] = [WordEntry(**w) for w in DUMMY_WORDS]
            self.region_ids["default_dummy"] = None

    def get_regions(self) -> List[Dict[str, Any]]:
        regions = []
        for key, words in self.regions.items():
            match = REGION_FILE_PATTERN.match(key)
            slug = match.group("slug") if match else key
            regions.append(
                {
                    "id": key,
                    "region_id": self.region_ids.get(key),
                    "name": slug.replace("_", " ").title(),
                    "count": len(words),
                }
            )
        regions.sort(key=lambda x: x["name"])
        return regions

    def fetch_word_catalog(self, region: Optional[str] = None) -> List[WordEntry]:
        if region is None:
            return [word for words in self.regions.values() for word in words]
        if region not in self.regions:
            raise CatalogFetchError(f"Unknown region {region!r}")
        return list(self.regions[region])
