#!/usr/bin/env python3
"""Configuration validation script."""

import sys
from pathlib import Path
from typing import List

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tonepicker.config.loader import ConfigLoader
from tonepicker.config.validation import ConfigFieldError, ConfigValidator


def validate_merged_config(overrides: dict) -> List[ConfigFieldError]:
    """Validate the configuration produced by defaults, file and overrides."""
    loader = ConfigLoader.create()
    config = loader.merge_config(overrides)
    return ConfigValidator.validate_config(config)


def main():
    """Main validation function."""
    print("🔍 Validating Tone Picker configuration...")

    loader = ConfigLoader.create()
    config_file = loader.config_dir / "tonepicker.yaml"
    print(f"\n📄 Config file: {config_file} ({'found' if config_file.exists() else 'missing, using defaults'})")

    all_valid = True

    errors = validate_merged_config({})
    if errors:
        print(f"❌ Found {len(errors)} validation errors:")
        for error in errors:
            print(f"  • {error.field}: {error.message} (value: {error.value})")
        all_valid = False
    else:
        settings = loader.load_settings()
        print("✅ Configuration is valid")
        print(f"  • cache: {settings.cache.max_entries} entries, ttl {settings.cache.ttl_seconds}s")
        print(f"  • rate limit: {settings.ratelimit.max_requests} requests / {settings.ratelimit.window_seconds}s")
        print(f"  • backend: {settings.backend.model} @ {settings.backend.api_url}")

    # Test explicit overrides on top of the file
    print("\n📋 Testing explicit overrides...")
    test_overrides = {
        "cache": {"max_entries": 50},
        "ratelimit": {"max_requests": 10},
    }

    try:
        errors = validate_merged_config(test_overrides)
        if errors:
            print("❌ Override validation failed:")
            for error in errors:
                print(f"  • {error.field}: {error.message}")
            all_valid = False
        else:
            print("✅ Override validation passed")

    except Exception as e:
        print(f"❌ Error testing overrides: {e}")
        all_valid = False

    if all_valid:
        print("\n🎉 All configuration validation passed!")
        sys.exit(0)
    else:
        print("\n❌ Configuration validation failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
