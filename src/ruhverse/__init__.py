from .audio import AudioController, verse_audio_url
from .cache import DatasetCache
from .hydration import (
    DatasetSource,
    HydrationController,
    HydrationState,
    PageBootstrap,
    extract_bootstrap,
    resolve_initial_index,
)
from .models import (
    Chapter,
    ChapterMeta,
    EditionPair,
    MalformedResponseError,
    OutOfRangeError,
    Verse,
)
from .remote import PrayerTimesClient, QuranCloudClient, UpstreamFetchError
from .render import PageRenderer
from .web import WebConfig, create_app

__all__ = [
    "AudioController",
    "verse_audio_url",
    "DatasetCache",
    "DatasetSource",
    "HydrationController",
    "HydrationState",
    "PageBootstrap",
    "extract_bootstrap",
    "resolve_initial_index",
    "Chapter",
    "ChapterMeta",
    "EditionPair",
    "Verse",
    "MalformedResponseError",
    "OutOfRangeError",
    "UpstreamFetchError",
    "QuranCloudClient",
    "PrayerTimesClient",
    "PageRenderer",
    "WebConfig",
    "create_app",
]
