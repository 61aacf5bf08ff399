"""Configuration management."""

from .manager import ConfigManager, DatasetConfig, JobConfig, create_sample_config

__all__ = ["ConfigManager", "DatasetConfig", "JobConfig", "create_sample_config"]
