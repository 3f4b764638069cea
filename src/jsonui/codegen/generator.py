"""
Project Generator
Renders a Tree plus its data model into a standalone Next.js project.
"""

from pathlib import Path
import time
from typing import Any

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

from ..core import LRUCache, Settings, get_logger, get_settings, hash_fields, safe_json_dumps
from ..monitoring import metrics_collector
from ..tree import Tree
from .lowering import PASSTHROUGH, lower_tree
from .models import ExportOptions, GeneratedFile

logger = get_logger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

# Page body sits inside `return (<> ... </>)`
_PAGE_INDENT = 3


def _env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


_environment = _env()


def _component_source(name: str) -> str:
    try:
        template = _environment.get_template(f"components/{name}.tsx.j2")
    except TemplateNotFound:
        template = _environment.get_template("components/_generic.tsx.j2")
    return template.render(name=name)


def generate_project(tree: Tree, data: Any = None, options: ExportOptions | None = None) -> list[GeneratedFile]:
    """
    Generate project files for `tree`.

    Pure: identical inputs give byte-identical output, sorted by path.

    Args:
        tree: Element tree to export
        data: Data model embedded as the page's initial data
        options: Export options

    Returns:
        Generated files
    """
    options = options or ExportOptions()
    data = {} if data is None else data
    lowered = lower_tree(tree, options.components, base_indent=_PAGE_INDENT)

    components = sorted(lowered.components)
    exported = components + ([PASSTHROUGH] if lowered.passthrough else [])
    context = {
        "options": options,
        "components": components,
        "exported": sorted(exported),
        "body": lowered.body,
        "actions": [safe_json_dumps(name) for name in sorted(lowered.actions)],
        "data_json": safe_json_dumps(data, indent=2),
        "project_json": safe_json_dumps(options.project_name),
        "title_json": safe_json_dumps(options.title),
    }

    files = {
        "app/layout.tsx": _environment.get_template("layout.tsx.j2").render(**context),
        "app/page.tsx": _environment.get_template("page.tsx.j2").render(**context),
        "components/ui/index.ts": _environment.get_template("index.ts.j2").render(**context),
        "lib/actions.ts": _environment.get_template("actions.ts.j2").render(**context),
        "lib/data.ts": _environment.get_template("data.ts.j2").render(**context),
        "package.json": _environment.get_template("package.json.j2").render(**context),
        "tsconfig.json": _environment.get_template("tsconfig.json.j2").render(**context),
    }
    if options.include_readme:
        files["README.md"] = _environment.get_template("README.md.j2").render(**context)
    for name in exported:
        files[f"components/ui/{name}.tsx"] = _component_source(name)

    return [GeneratedFile(path=path, content=files[path]) for path in sorted(files)]


class CodeGenerator:
    """
    Cached project generator.

    Results are keyed by an xxhash digest of the serialized tree, data and
    options, so repeated exports of an unchanged session are free.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        max_size: int | None = None,
        ttl_seconds: int | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.settings = settings
        self.cache: LRUCache[list[GeneratedFile]] = LRUCache(
            max_size=max_size or settings.export_cache_size,
            ttl_seconds=ttl_seconds or settings.export_cache_ttl,
        )

    def default_options(self) -> ExportOptions:
        return ExportOptions(project_name=self.settings.default_project_name)

    def generate(self, tree: Tree, data: Any = None, options: ExportOptions | None = None) -> list[GeneratedFile]:
        options = options or self.default_options()
        key = hash_fields(
            safe_json_dumps(tree.model_dump(mode="json")),
            safe_json_dumps({} if data is None else data),
            safe_json_dumps(options.model_dump(mode="json")),
        )

        start = time.perf_counter()
        cached = self.cache.get(key)
        if cached is not None:
            metrics_collector.record_export("hit", time.perf_counter() - start)
            logger.debug("export_cache_hit", key=key[:16])
            return list(cached)

        files = generate_project(tree, data, options)
        self.cache.set(key, list(files))
        metrics_collector.record_export("miss", time.perf_counter() - start)
        logger.info(
            "project_generated",
            files=len(files),
            elements=len(tree.elements),
            cache_size=self.cache.stats.size,
            cache_hit_rate=round(self.cache.stats.hit_rate, 3),
        )
        return files

    def clear_cache(self) -> None:
        self.cache.clear()


__all__ = ["generate_project", "CodeGenerator", "TEMPLATE_DIR"]
