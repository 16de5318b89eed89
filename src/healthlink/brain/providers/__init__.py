"""Provider adapters. Each ``<name>_provider`` module exposes ``create_provider(settings)``."""
