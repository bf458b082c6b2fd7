"""
Disk cache for generation service calls.

Completions are expensive and slow, and re-running the same instruction on the
same document (scripts, demos, tests against recorded replies) should not hit
the service again. Entries are pickled under the cache directory and keyed by
the calling component plus a hash of the request.
"""

import hashlib
import json
import pickle
import time
from pathlib import Path
from typing import Any, Optional
import logging

from latex_edit_engine.core.surgical_editor.config import CACHE_DIR

logger = logging.getLogger(__name__)


class CompletionCache:
    """
    Pickle-file cache shared by every component that calls the generator.

    File names are `completion_<component>_<hash>.pkl`, which lets entries be
    cleared or counted per component.
    """

    def __init__(self, cache_dir: str = CACHE_DIR):
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def _generate_cache_key(self, component: str, input_data: Any) -> str:
        data_str = json.dumps(input_data, sort_keys=True, default=str)
        combined = f"{component}:{data_str}"
        hash_value = hashlib.sha256(combined.encode()).hexdigest()
        return f"completion_{component}_{hash_value[:16]}"

    def _cache_file(self, component: str, input_data: Any) -> Path:
        return self.cache_dir / f"{self._generate_cache_key(component, input_data)}.pkl"

    def get(self, component: str, input_data: Any) -> Optional[Any]:
        """
        Retrieve a cached result.

        Args:
            component: Component name making the call
            input_data: Input data that determines the call

        Returns:
            Cached result if found, None otherwise
        """
        cache_file = self._cache_file(component, input_data)
        if not cache_file.exists():
            return None

        try:
            with open(cache_file, "rb") as f:
                cached_data = pickle.load(f)
        except (OSError, pickle.UnpicklingError, EOFError) as e:
            logger.error("Failed to load cache entry %s: %s", cache_file.name, e)
            cache_file.unlink(missing_ok=True)
            return None

        logger.debug("Completion cache HIT for %s: %s", component, cache_file.stem)
        return cached_data["result"]

    def set(self, component: str, input_data: Any, result: Any) -> None:
        cache_file = self._cache_file(component, input_data)
        cached_data = {
            "component": component,
            "timestamp": time.time(),
            "result": result,
        }
        try:
            with open(cache_file, "wb") as f:
                pickle.dump(cached_data, f)
        except OSError as e:
            logger.error("Failed to save cache entry %s: %s", cache_file.name, e)
            return
        logger.debug("Completion cache SET for %s: %s", component, cache_file.stem)

    def clear(self) -> int:
        """Remove every entry. Returns the number of entries cleared."""
        return self._remove(list(self.cache_dir.glob("completion_*.pkl")))

    def clear_by_component(self, component: str) -> int:
        return self._remove(list(self.cache_dir.glob(f"completion_{component}_*.pkl")))

    def _remove(self, cache_files) -> int:
        for cache_file in cache_files:
            cache_file.unlink(missing_ok=True)
        if cache_files:
            logger.info("Cleared %d completion cache entries", len(cache_files))
        return len(cache_files)

    def get_stats(self, component: Optional[str] = None) -> dict:
        """
        Cache statistics, for every component or for a single one.
        """
        if component is not None:
            cache_files = list(self.cache_dir.glob(f"completion_{component}_*.pkl"))
            return {
                "component": component,
                "entries": len(cache_files),
                "size_bytes": sum(f.stat().st_size for f in cache_files if f.exists()),
            }

        cache_files = list(self.cache_dir.glob("completion_*.pkl"))
        component_stats = {}
        for cache_file in cache_files:
            # completion_<component>_<hash>; component names may contain underscores
            comp = cache_file.stem[len("completion_"):].rsplit("_", 1)[0]
            component_stats[comp] = component_stats.get(comp, 0) + 1

        return {
            "total_entries": len(cache_files),
            "total_size_bytes": sum(f.stat().st_size for f in cache_files if f.exists()),
            "component_breakdown": component_stats,
        }


_global_cache: Optional[CompletionCache] = None


def get_cache() -> CompletionCache:
    """Get or create the global completion cache instance."""
    global _global_cache
    if _global_cache is None:
        _global_cache = CompletionCache()
    return _global_cache
