"""Entry point for listener profile analysis"""
import json
import logging
import os
import sys
import traceback

from taste_profile.analysis import ProfileAnalyzer
from taste_profile.archetypes import DEFAULT_ARCHETYPES, load_archetype_table
from taste_profile.config import settings
from taste_profile.services.spotify import SpotifyCatalog
from taste_profile.utils.cancellation import Cancellation

logger = logging.getLogger(__name__)


def run() -> None:
    """Analyze the listener behind SPOTIFY_TOKEN and write profile.json."""
    logging.basicConfig(level=settings.LOG_LEVEL, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    try:
        # Log config (excluding sensitive data)
        logger.info("Using configuration:")
        safe_config = settings.model_dump(exclude={'SPOTIFY_TOKEN'})
        logger.info(json.dumps(safe_config, indent=2))

        archetypes = load_archetype_table(settings.ARCHETYPES_FILE) if settings.ARCHETYPES_FILE else DEFAULT_ARCHETYPES
        cancellation = Cancellation(settings.FETCH_TIME_LIMIT_SECONDS)
        catalog = SpotifyCatalog(
            token=settings.SPOTIFY_TOKEN,
            base_url=settings.SPOTIFY_API_URL,
            time_range=settings.TOP_TRACKS_TIME_RANGE,
            timeout=settings.REQUEST_TIMEOUT,
            retries=settings.REQUEST_RETRIES,
            cancellation=cancellation
        )
        analyzer = ProfileAnalyzer.from_settings(catalog, settings, archetypes, cancellation)
        profile = analyzer.analyze()

        os.makedirs(settings.OUTPUT_DIR, exist_ok=True)
        output_path = os.path.join(settings.OUTPUT_DIR, "profile.json")
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(profile.model_dump(), f, indent=2)

        logger.info(f"Profile written to {output_path}")
        print(json.dumps(profile.model_dump(), indent=2))

    except Exception as e:
        logger.error(f"Error during profile analysis: {e}")
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    run()
