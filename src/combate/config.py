from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .catalog import SkillCatalog
from .models import CatalogItem, ModelError, SkillCode, SkillLevelEntry

logger = logging.getLogger(__name__)


class CatalogError(RuntimeError):
    """Raised when the skills catalog file is invalid."""


def _read_raw(path: Path) -> Any:
    if not path.exists():
        raise CatalogError(f"Catalog file not found: {path}")

    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")

    if suffix == ".json":
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise CatalogError(f"Invalid JSON in {path}: {exc}") from exc

    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise CatalogError(
                "YAML catalog requested, but PyYAML is not installed. "
                "Install the `yaml` extra or use JSON."
            ) from exc
        return yaml.safe_load(text)

    raise CatalogError(f"Unsupported catalog format '{suffix}'. Use .json or .yaml/.yml.")


def _load_levels(code: str, payload: Mapping[str, Any]) -> Dict[int, SkillLevelEntry]:
    levels: Dict[int, SkillLevelEntry] = {}
    for raw_level, raw_entry in payload.items():
        try:
            level = int(raw_level)
        except (TypeError, ValueError) as exc:
            raise CatalogError(f"Invalid level key '{raw_level}' for '{code}'.") from exc
        if not isinstance(raw_entry, Mapping):
            raise CatalogError(f"Level {level} of '{code}' must be an object.")
        try:
            levels[level] = SkillLevelEntry.from_dict(raw_entry)
        except ModelError as exc:
            raise CatalogError(f"Invalid level {level} for '{code}': {exc}") from exc
    return levels


def _is_level_table(payload: Mapping[str, Any]) -> bool:
    return bool(payload) and all(str(key).lstrip("-").isdigit() for key in payload.keys())


def catalog_from_payload(payload: Any) -> SkillCatalog:
    if not isinstance(payload, Mapping):
        raise CatalogError("Catalog root must be an object (JSON/YAML mapping).")

    entries = payload.get("skills")
    if not isinstance(entries, Mapping):
        raise CatalogError("Catalog must define a 'skills' mapping.")

    skills: Dict[str, Dict[int, SkillLevelEntry]] = {}
    items: Dict[str, CatalogItem] = {}
    for code, raw in entries.items():
        code = str(code)
        if not isinstance(raw, Mapping):
            raise CatalogError(f"Catalog entry '{code}' must be an object.")
        if _is_level_table(raw):
            skills[code] = _load_levels(code, raw)
            continue
        try:
            items[code] = CatalogItem.from_dict(code, raw)
        except ModelError as exc:
            raise CatalogError(f"Invalid catalog item '{code}': {exc}") from exc

    missing = [code.value for code in SkillCode if code.value not in skills]
    if missing:
        logger.warning("Catalog has no level table for skills: %s", ", ".join(missing))

    return SkillCatalog(skills=skills, items=items)


def load_catalog(path: Path | str) -> SkillCatalog:
    path = Path(path)
    catalog = catalog_from_payload(_read_raw(path))
    logger.debug(
        "Loaded catalog %s: %d skills, %d items",
        path,
        len(catalog.skills),
        len(catalog.items),
    )
    return catalog


def resolve_project_root() -> Path:
    env_root = os.environ.get("COMBATE_PROJECT_ROOT", "").strip()
    if env_root:
        return Path(env_root).expanduser().resolve()
    return Path(__file__).resolve().parents[2]


class CatalogRepository:
    """Locates and loads the shipped skills catalog."""

    def __init__(self, project_root: Optional[Path] = None):
        if project_root is None:
            project_root = resolve_project_root()
        self.project_root = project_root
        env_path = os.environ.get("COMBATE_CATALOG_PATH", "").strip()
        if env_path:
            self.catalog_path = Path(env_path).expanduser()
        else:
            self.catalog_path = self.project_root / "data" / "skills.json"

    def load(self) -> SkillCatalog:
        return load_catalog(self.catalog_path)

    def load_or_unloaded(self) -> SkillCatalog:
        try:
            return self.load()
        except CatalogError as exc:
            logger.warning("Skills catalog unavailable, lookups will return no data: %s", exc)
            return SkillCatalog.unloaded()
