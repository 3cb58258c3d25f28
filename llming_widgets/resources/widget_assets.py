"""Turns prebuilt widget bundles into self-contained markup.

The web build writes one ``<component>.js`` (required) and optionally one
``<component>.css`` per widget into the artifact directory.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from llming_widgets.config import BUILD_COMMAND
from llming_widgets.errors import AssetNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WidgetAssets:
    js: str
    css: str
    html: str


def _read_optional(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError:
        return ""


def _require_bundle(component: str, assets_dir: Path) -> Path:
    if not assets_dir.is_dir():
        raise AssetNotFoundError(
            f'Widget assets not found. Expected directory {assets_dir}. '
            f'Run "{BUILD_COMMAND}" before starting the server.',
            path=str(assets_dir),
            remediation=BUILD_COMMAND,
        )
    js_path = assets_dir / f"{component}.js"
    if not js_path.is_file():
        raise AssetNotFoundError(
            f'Widget JS for "{component}" not found at {js_path}. '
            f'Run "{BUILD_COMMAND}" to generate the assets.',
            path=str(js_path),
            remediation=BUILD_COMMAND,
        )
    return js_path


def load_widget_assets(component: str, assets_dir: Path) -> WidgetAssets:
    """Read a widget's bundle and inline it into a single HTML fragment.

    :param component: Component name, e.g. "todo"
    :param assets_dir: Directory holding the build output
    :return: The JS, CSS and the constructed HTML
    :raises AssetNotFoundError: If the directory or the JS bundle is missing
    """
    js_path = _require_bundle(component, Path(assets_dir))
    js = js_path.read_text(encoding="utf-8")
    css = _read_optional(js_path.with_suffix(".css"))

    parts = [f'<div id="{component}-root"></div>']
    if css:
        parts.append(f"<style>{css}</style>")
    parts.append(f'<script type="module">{js}</script>')
    return WidgetAssets(js=js, css=css, html="\n".join(parts))


def link_widget_assets(component: str, assets_dir: Path, assets_url: str) -> WidgetAssets:
    """Build markup that references the bundle under ``assets_url`` instead of inlining it."""
    js_path = _require_bundle(component, Path(assets_dir))
    has_css = js_path.with_suffix(".css").is_file()

    parts = [f'<div id="{component}-root"></div>']
    if has_css:
        parts.append(f'<link rel="stylesheet" href="{assets_url}/{component}.css">')
    parts.append(f'<script type="module" src="{assets_url}/{component}.js"></script>')
    return WidgetAssets(js="", css="", html="\n".join(parts))


def check_assets_dir(assets_dir: Path) -> Optional[str]:
    """Return a diagnostic if the artifact directory is missing, else None."""
    if Path(assets_dir).is_dir():
        return None
    return f'Widget assets directory {assets_dir} does not exist. Run "{BUILD_COMMAND}" to build the widgets.'
