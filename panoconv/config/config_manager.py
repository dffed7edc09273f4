"""
Configuration Manager for panoconv
Handles saving/loading conversion presets as JSON files
"""

import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional, Tuple
from datetime import datetime

from .defaults import (
    PROJECTION_KINDS, CUBEMAP_LAYOUTS, CONFIG_FILE_VERSION,
    DEFAULT_SOURCE_PROJECTION, DEFAULT_TARGET_PROJECTION,
    DEFAULT_CUBEMAP_LAYOUT, DEFAULT_WORKERS, DEFAULT_SHARE_FACES,
    ATOMIC_WRITES, WORKERS_MIN, WORKERS_MAX
)

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Manages conversion presets (projection pair, layout, workers).
    Lets users store the options of a run and replay them later.
    """

    def save_config(self, config: Dict[str, Any], filepath: Path) -> bool:
        """
        Save conversion configuration to JSON file.

        Args:
            config: Configuration dictionary to save
            filepath: Destination file; missing parent directories are created

        Returns:
            True if save successful, False otherwise
        """
        filepath = Path(filepath)

        save_data = {
            'metadata': {
                'saved_at': datetime.now().isoformat(),
                'version': CONFIG_FILE_VERSION,
                'config_name': filepath.stem
            },
            'conversion_config': config
        }

        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(save_data, f, indent=2)
        except (OSError, TypeError) as e:
            logger.error(f"Failed to save configuration: {e}")
            return False

        logger.info(f"Configuration saved to: {filepath}")
        return True

    def load_config(self, filepath: Path) -> Optional[Dict[str, Any]]:
        """
        Load conversion configuration from JSON file.

        Args:
            filepath: Path to configuration file

        Returns:
            Configuration dictionary, or None if load failed
        """
        filepath = Path(filepath)
        if not filepath.exists():
            logger.error(f"Configuration file not found: {filepath}")
            return None

        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load configuration: {e}")
            return None

        if not isinstance(data, dict):
            logger.error(f"Configuration file is not a JSON object: {filepath}")
            return None

        if 'conversion_config' in data:
            config = data['conversion_config']
            metadata = data.get('metadata', {})
            logger.info(f"Configuration loaded: {metadata.get('config_name', filepath.stem)}")
            logger.debug(f"Saved at: {metadata.get('saved_at', 'Unknown')}")
        else:
            # Legacy format without metadata
            config = data
            logger.info(f"Configuration loaded (legacy format): {filepath.stem}")

        return config

    def get_default_config(self) -> Dict[str, Any]:
        """Get default conversion configuration"""
        return {
            'source_projection': DEFAULT_SOURCE_PROJECTION,
            'target_projection': DEFAULT_TARGET_PROJECTION,
            'layout': DEFAULT_CUBEMAP_LAYOUT,
            'workers': DEFAULT_WORKERS,
            'share_faces': DEFAULT_SHARE_FACES,
            'atomic_write': ATOMIC_WRITES,
        }

    def validate_config(self, config: Dict[str, Any]) -> Tuple[bool, list]:
        """
        Validate configuration for correctness.

        Unknown keys are ignored; missing keys fall back to defaults.

        Returns:
            Tuple of (is_valid, list_of_errors)
        """
        errors = []

        for key in ('source_projection', 'target_projection'):
            if key in config and config[key] not in PROJECTION_KINDS:
                errors.append(f"{key} must be one of {sorted(PROJECTION_KINDS)}")

        if 'layout' in config and config['layout'] not in CUBEMAP_LAYOUTS:
            errors.append(f"layout must be one of {sorted(CUBEMAP_LAYOUTS)}")

        workers = config.get('workers', DEFAULT_WORKERS)
        if isinstance(workers, bool) or not isinstance(workers, int) \
                or not (WORKERS_MIN <= workers <= WORKERS_MAX):
            errors.append(f"workers must be an integer between {WORKERS_MIN} and {WORKERS_MAX}")

        for key in ('share_faces', 'atomic_write'):
            if key in config and not isinstance(config[key], bool):
                errors.append(f"{key} must be true or false")

        is_valid = len(errors) == 0
        return is_valid, errors
