"""
Switch Preset Resolution

Applies named switch presets to a Document. Presets are composable and can
override each other, allowing flexible combination of page, margin and
quality settings.

Examples:
    # Apply multiple presets (later overrides earlier)
    >>> apply_presets(document, ["page_letter_landscape", "margins_narrow"])

    # Draft quality on top of the defaults
    >>> apply_presets(document, ["quality_draft"])
"""

import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List

from dotenv import load_dotenv
from omegaconf import OmegaConf

if TYPE_CHECKING:
    from wkpdf.contexts.document.document import Document

load_dotenv()
PRESETS_PATH = Path(os.getenv("WKPDF_PRESETS_PATH") or Path(__file__).parent / "presets.yaml")


def load_presets(config_path: Path = None) -> Dict[str, Dict[str, Any]]:
    """
    Load the presets YAML file and flatten it to a single-level dict.

    Collapses nested structure: page.letter_landscape -> page_letter_landscape

    Args:
        config_path: Optional path to config file (defaults to WKPDF_PRESETS_PATH env variable)

    Returns:
        Flattened dict mapping preset names to switch mappings
    """
    if config_path is None:
        config_path = PRESETS_PATH

    nested = OmegaConf.to_container(OmegaConf.load(config_path), resolve=True)

    flattened = {}
    for category, presets in nested.items():
        for name, switches in presets.items():
            flattened[f"{category}_{name}"] = switches

    return flattened


def apply_presets(
    document: "Document",
    preset_names: List[str],
    config_path: Path = None,
) -> "Document":
    """
    Apply named switch presets to a document.

    Presets are applied in order, with later presets overriding earlier ones.

    Args:
        document: Document to configure
        preset_names: Preset names (e.g., ["page_a4_landscape", "margins_narrow"])
        config_path: Optional path to the presets YAML (defaults to WKPDF_PRESETS_PATH)

    Returns:
        The same document, for chaining

    Raises:
        ValueError: If a preset is not found
    """
    presets = load_presets(config_path)

    for preset_name in preset_names:
        if preset_name not in presets:
            available = list(presets.keys())
            raise ValueError(f"Preset '{preset_name}' not found. Available presets: {available}")

        document.switches.update(presets[preset_name])

    return document
