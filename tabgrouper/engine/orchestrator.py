"""GroupingOrchestrator — the engine façade.

One explicitly constructed instance per host process. It owns the
PatternStore, the Classifier and the ClassificationCache, and talks to three
collaborators at its boundary:

  - GroupAssigner   — performs "assign resource X to group G" requests
  - ResourceSource  — enumerates resources for bulk grouping (optional)
  - SettingsStore   — configuration source/sink (optional)

Per-resource path (``classify_and_assign``):
  1. Skip resources without id/url, already grouped, or under an excluded scheme.
  2. URL cache hit → assign on Matched, stop on NO_MATCH.
  3. Miss → extract the domain (InvalidUrl skips the resource), classify, cache
     the result (by URL, and by domain for auto-pattern matches), assign on Matched.

Batch path (``classify_and_assign_batch``) filters to ungrouped resources,
consults the domain tier first, then falls back to the per-URL path.

Ordering: assignments run one at a time under a single asyncio.Lock, so a
group created for one resource is visible to the next resource's "does this
group exist" check. Nothing runs in parallel.

Every configuration mutation invalidates the cache synchronously (via the
PatternStore subscription) before the mutating call returns.
"""

from __future__ import annotations

import asyncio
from typing import Iterable, Optional
from urllib.parse import urlsplit

from tabgrouper.constants import DEFAULT_EXCLUDED_SCHEMES
from tabgrouper.engine.cache import ClassificationCache
from tabgrouper.engine.classifier import Classifier
from tabgrouper.engine.compiler import compile_manual_pattern, compile_template
from tabgrouper.engine.errors import ExternalAssignmentFailure, InvalidUrl, SettingsError
from tabgrouper.engine.store import PatternStore
from tabgrouper.groups.protocol import GroupAssigner, ResourceSource
from tabgrouper.models.classification import ClassificationResult, Matched
from tabgrouper.models.patterns import GroupColor, ManualPattern
from tabgrouper.models.resource import Resource
from tabgrouper.settings.parser import parse_settings, serialize_settings
from tabgrouper.settings.store import SettingsStore
from tabgrouper.utils.logger import (
    PerformanceLogger,
    clear_operation_id,
    get_logger,
    set_operation_id,
)
from tabgrouper.utils.ulid import generate_ulid

logger = get_logger(__name__)


def extract_domain(url: str) -> str:
    """Return the lower-cased host name of ``url``.

    Raises:
        InvalidUrl: the URL cannot be parsed or has no host name.
    """
    try:
        hostname = urlsplit(url).hostname
    except (ValueError, TypeError, AttributeError) as exc:
        raise InvalidUrl(url, str(exc)) from exc
    if not hostname:
        raise InvalidUrl(url)
    return hostname


class GroupingOrchestrator:
    """Classify resources and request their group assignment."""

    def __init__(
        self,
        assigner: GroupAssigner,
        resources: Optional[ResourceSource] = None,
        settings_store: Optional[SettingsStore] = None,
        excluded_schemes: Iterable[str] = DEFAULT_EXCLUDED_SCHEMES,
        store: Optional[PatternStore] = None,
        cache: Optional[ClassificationCache] = None,
    ) -> None:
        self._assigner = assigner
        self._resources = resources
        self._settings_store = settings_store
        self.excluded_schemes: tuple[str, ...] = tuple(excluded_schemes)
        self.store = store or PatternStore()
        self.classifier = Classifier(self.store)
        self.cache = cache or ClassificationCache()
        # resource id → (url, group name) of the last assignment this engine made
        self._assigned: dict[int, tuple[str, str]] = {}
        self._assign_lock = asyncio.Lock()
        self.store.subscribe(self.invalidate)

    # ── Cache ─────────────────────────────────────────────────────────────────

    def invalidate(self) -> None:
        """Drop every cached classification and assignment memo."""
        self.cache.invalidate_all()
        self._assigned.clear()

    # ── Settings ──────────────────────────────────────────────────────────────

    def load_settings(self) -> bool:
        """Load settings from the configuration source into the PatternStore.

        Called once at startup and again on every refresh. When the source
        cannot be read, the current configuration is kept.

        Returns:
            True if settings were (re)loaded, False if the prior state was kept.
        """
        if self._settings_store is None:
            logger.debug("No settings store configured — keeping current settings")
            return False
        try:
            raw = self._settings_store.load_raw()
        except SettingsError as exc:
            logger.error("Settings load failed — keeping current settings", error=str(exc))
            return False

        settings = parse_settings(raw)
        self.store.replace(settings)
        logger.info(
            "Settings loaded",
            manual_patterns=len(settings.manual_patterns),
            auto_patterns=[t.template for t in settings.auto_patterns],
            auto_patterns_enabled=settings.auto_patterns_enabled,
        )
        return True

    def refresh(self) -> bool:
        return self.load_settings()

    def _persist(self) -> None:
        if self._settings_store is None:
            return
        try:
            self._settings_store.save_raw(serialize_settings(self.store.snapshot()))
        except (OSError, SettingsError) as exc:
            logger.error("Settings save failed — change kept in memory only", error=str(exc))

    # ── Commands ──────────────────────────────────────────────────────────────

    def manual_patterns(self) -> list[ManualPattern]:
        return list(self.store.manual_patterns)

    def auto_pattern_templates(self) -> list[str]:
        return self.store.templates()

    @property
    def auto_patterns_enabled(self) -> bool:
        return self.store.auto_patterns_enabled

    def add_manual_pattern(
        self,
        pattern: str,
        group_name: str,
        color: Optional[GroupColor] = None,
    ) -> ManualPattern:
        """Compile and append a manual pattern.

        Raises:
            InvalidRegex: the pattern does not compile; nothing is changed.
        """
        compiled = compile_manual_pattern(pattern, group_name, color)
        self.store.add_manual(compiled)
        self._persist()
        logger.info(
            "Manual pattern added",
            pattern=pattern,
            group_name=group_name,
            color=color.value if color else None,
        )
        return compiled

    def remove_manual_pattern(self, pattern: str, group_name: str) -> bool:
        removed = self.store.remove_manual(pattern, group_name)
        if not removed:
            logger.warning("Manual pattern not found", pattern=pattern, group_name=group_name)
            return False
        self._persist()
        logger.info("Manual pattern removed", pattern=pattern, group_name=group_name)
        return True

    def add_auto_pattern(self, template: str) -> bool:
        """Compile and append an auto-pattern template.

        Returns:
            True when added, False when the same template string already exists.

        Raises:
            InvalidTemplate: the template does not compile; nothing is changed.
        """
        compiled = compile_template(template)
        if not self.store.add_auto(compiled):
            logger.warning("Auto-pattern template already exists", template=template)
            return False
        self._persist()
        logger.info("Auto-pattern added", template=template)
        return True

    def remove_auto_pattern(self, template: str) -> bool:
        if not self.store.remove_auto(template):
            logger.warning("Auto-pattern template not found", template=template)
            return False
        self._persist()
        logger.info("Auto-pattern removed", template=template)
        return True

    def set_auto_patterns_enabled(self, enabled: bool) -> None:
        self.store.set_auto_enabled(enabled)
        self._persist()
        logger.info("Auto-patterns enabled set", enabled=bool(enabled))

    # ── Classification ────────────────────────────────────────────────────────

    def is_excluded(self, url: str) -> bool:
        return url.startswith(self.excluded_schemes)

    def classify_url(self, url: str, domain: Optional[str] = None) -> ClassificationResult:
        """Classify ``url`` through the URL cache, caching a fresh result on miss.

        Raises:
            InvalidUrl: cache miss and the URL has no parseable host name.
        """
        cached = self.cache.lookup_by_url(url)
        if cached is not None:
            logger.debug("URL cache hit", url=url, matched=cached.matched)
            return cached

        if domain is None:
            domain = extract_domain(url)
        result = self.classifier.classify(domain)
        self.cache.store(url, domain, result)
        return result

    def _eligible(self, resource: Resource) -> bool:
        if resource.id is None or not resource.url:
            logger.debug("Skipping resource without id or URL", resource_id=resource.id)
            return False
        if self.is_excluded(resource.url):
            logger.debug("Skipping excluded URL", resource_id=resource.id, url=resource.url)
            return False
        if resource.is_grouped:
            logger.debug(
                "Skipping resource already in a group",
                resource_id=resource.id,
                current_group=resource.current_group,
            )
            return False
        return True

    async def _assign(self, resource: Resource, result: Matched) -> bool:
        assert resource.id is not None and resource.url is not None
        key = (resource.url, result.group_name)

        # Memo check, assignment and memo write form one critical section so
        # overlapping calls for the same resource request one assignment.
        async with self._assign_lock:
            if self._assigned.get(resource.id) == key:
                logger.debug(
                    "Resource already assigned for this URL",
                    resource_id=resource.id,
                    group_name=result.group_name,
                )
                return False

            try:
                assignment = await self._assigner.assign(
                    resource.id, result.group_name, result.color
                )
            except Exception as exc:  # noqa: BLE001
                failure = ExternalAssignmentFailure(resource.id, result.group_name, exc)
                logger.error(
                    "Group assignment failed — resource skipped",
                    resource_id=resource.id,
                    group_name=result.group_name,
                    error=str(failure),
                    error_type=type(exc).__name__,
                )
                return False

            self._assigned[resource.id] = key

        logger.info(
            "Resource grouped",
            resource_id=resource.id,
            group_name=result.group_name,
            group_id=assignment.group_id,
            created=assignment.created,
            source=result.source.value,
        )
        return True

    async def classify_and_assign(self, resource: Resource) -> bool:
        """Classify one resource and request its assignment on a match.

        Returns:
            True if an assignment was requested and succeeded.
        """
        if not self._eligible(resource):
            return False
        try:
            result = self.classify_url(resource.url)
        except InvalidUrl as exc:
            logger.warning("Skipping resource with invalid URL", resource_id=resource.id, error=str(exc))
            return False

        if not isinstance(result, Matched):
            return False
        return await self._assign(resource, result)

    async def classify_and_assign_batch(self, resources: Iterable[Resource]) -> int:
        """Classify and assign every ungrouped resource, strictly in order.

        Returns:
            Number of resources assigned to a group.
        """
        candidates = [r for r in resources if self._eligible(r)]
        logger.info("Grouping ungrouped resources", candidates=len(candidates))

        grouped = 0
        for resource in candidates:
            try:
                domain = extract_domain(resource.url)
            except InvalidUrl as exc:
                logger.warning(
                    "Skipping resource with invalid URL",
                    resource_id=resource.id,
                    error=str(exc),
                )
                continue

            result = self.cache.lookup_by_domain(domain)
            if result is not None:
                logger.debug("Domain cache hit", domain=domain, group_name=result.group_name)
                self.cache.store(resource.url, domain, result)
            else:
                result = self.classify_url(resource.url, domain=domain)

            if isinstance(result, Matched) and await self._assign(resource, result):
                grouped += 1

        logger.info("Grouping finished", candidates=len(candidates), grouped=grouped)
        return grouped

    async def group_existing(self) -> int:
        """Bulk-group every ungrouped resource reported by the ResourceSource."""
        if self._resources is None:
            logger.warning("No resource source configured — nothing to group")
            return 0

        set_operation_id(generate_ulid())
        try:
            with PerformanceLogger("group_existing", logger):
                resources = await self._resources.list_resources()
                return await self.classify_and_assign_batch(resources)
        finally:
            clear_operation_id()
