"""
Configuration management.
Single responsibility: load, validate, and manage configuration.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List
from dataclasses import dataclass

from ..utils.logger import get_logger


logger = get_logger()

OPERATIONS = ("filter", "compare")
FILTER_MODES = ("exclude", "include")


@dataclass
class DatasetConfig:
    """Configuration for a single dataset."""

    name: str
    path: str
    delimiter: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not self.path:
            raise ValueError("Dataset path is required")
        if not isinstance(self.path, str):
            raise ValueError(f"Dataset path must be text: {self.path!r}")
        if not self.name:
            raise ValueError("Dataset name is required")
        if self.delimiter is not None and (not isinstance(self.delimiter, str)
                                           or len(self.delimiter) != 1):
            raise ValueError(f"Delimiter must be a single character: {self.delimiter!r}")


@dataclass
class JobConfig:
    """Configuration for one filter or compare run."""

    name: str
    operation: str
    left_dataset: str
    right_dataset: str
    column: Optional[str] = None
    mode: str = "exclude"
    key_column: Optional[str] = None
    value_column: Optional[str] = None
    case_insensitive: bool = False
    only_differences: bool = False
    output: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.operation not in OPERATIONS:
            raise ValueError(
                f"Job {self.name}: operation must be one of {', '.join(OPERATIONS)}"
            )
        if not self.left_dataset or not self.right_dataset:
            raise ValueError(f"Job {self.name}: left and right datasets are required")

        if self.operation == "filter":
            if not self.column:
                raise ValueError(f"Job {self.name}: filter requires a column")
            if self.mode not in FILTER_MODES:
                raise ValueError(
                    f"Job {self.name}: mode must be one of {', '.join(FILTER_MODES)}"
                )
        else:
            if not self.key_column or not self.value_column:
                raise ValueError(
                    f"Job {self.name}: compare requires key_column and value_column"
                )


class ConfigManager:
    """
    Manage application configuration.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config manager.

        Args:
            config_path: Path to configuration file
        """
        self.config_path = Path(config_path or "csvrecon.yaml")
        self.config: Dict[str, Any] = {}
        self.datasets: Dict[str, DatasetConfig] = {}
        self.jobs: List[JobConfig] = []

    def load(self) -> Dict[str, Any]:
        """
        Load configuration from file.

        Returns:
            Configuration dictionary

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If the file is not valid YAML or a dataset or job
                is invalid
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config not found: {self.config_path}")

        logger.info("config.loading", file=str(self.config_path))

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self.config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error("config.invalid_yaml",
                       file=str(self.config_path),
                       error=str(e))
            raise ValueError(f"Invalid YAML in {self.config_path}: {e}") from e

        if not isinstance(self.config, dict):
            raise ValueError(f"Config {self.config_path} must be a mapping "
                             "with datasets and jobs")

        self._parse_datasets()
        self._parse_jobs()

        logger.info("config.loaded",
                   datasets=len(self.datasets),
                   jobs=len(self.jobs))

        return self.config

    def _parse_datasets(self):
        """Parse dataset configurations."""
        self.datasets = {}
        datasets = self.config.get("datasets") or {}
        if not isinstance(datasets, dict):
            raise ValueError("datasets must be a mapping of name to settings")

        for name, cfg in datasets.items():
            if not isinstance(cfg, dict):
                logger.error("config.dataset.invalid", dataset=name)
                raise ValueError(
                    f"Dataset {name}: expected a mapping with a path, got {cfg!r}"
                )
            try:
                self.datasets[name] = DatasetConfig(
                    name=name,
                    path=cfg.get("path", ""),
                    delimiter=cfg.get("delimiter")
                )
            except ValueError as e:
                logger.error("config.dataset.invalid",
                           dataset=name,
                           error=str(e))
                raise

    def _parse_jobs(self):
        """Parse job configurations."""
        self.jobs = []
        jobs = self.config.get("jobs") or []
        if not isinstance(jobs, list):
            raise ValueError("jobs must be a list")

        for index, job in enumerate(jobs):
            if not isinstance(job, dict):
                logger.error("config.job.invalid", job=index + 1)
                raise ValueError(f"Job {index + 1}: expected a mapping, got {job!r}")
            name = job.get("name") or f"job_{index + 1}"
            try:
                job_cfg = JobConfig(
                    name=name,
                    operation=job.get("operation", "filter"),
                    left_dataset=job.get("left"),
                    right_dataset=job.get("right"),
                    column=job.get("column"),
                    mode=job.get("mode", "exclude"),
                    key_column=job.get("key_column"),
                    value_column=job.get("value_column"),
                    case_insensitive=job.get("case_insensitive", False),
                    only_differences=job.get("only_differences", False),
                    output=job.get("output")
                )
            except ValueError as e:
                logger.error("config.job.invalid",
                           job=name,
                           error=str(e))
                raise

            for dataset in (job_cfg.left_dataset, job_cfg.right_dataset):
                if dataset not in self.datasets:
                    logger.error("config.job.unknown_dataset",
                               job=name,
                               dataset=dataset)
                    raise ValueError(f"Job {name}: unknown dataset {dataset}")

            self.jobs.append(job_cfg)

    def get_dataset(self, name: str) -> DatasetConfig:
        """
        Get dataset configuration by name.

        Args:
            name: Dataset name

        Returns:
            Dataset configuration

        Raises:
            KeyError: If dataset not found
        """
        if name not in self.datasets:
            raise KeyError(f"Dataset not found: {name}")
        return self.datasets[name]

    def resolve_path(self, dataset: DatasetConfig) -> Path:
        """Dataset path, relative paths taken from the config file's folder."""
        path = Path(dataset.path)
        if path.is_absolute():
            return path
        return self.config_path.parent / path

    def save(self, path: Optional[Path] = None):
        """
        Save configuration to file.

        Args:
            path: Output path (uses original path if not specified)
        """
        output_path = Path(path or self.config_path)

        logger.info("config.saving", file=str(output_path))

        config_dict = {
            "datasets": {},
            "jobs": []
        }

        for name, dataset in self.datasets.items():
            config_dict["datasets"][name] = {"path": dataset.path}
            if dataset.delimiter is not None:
                config_dict["datasets"][name]["delimiter"] = dataset.delimiter

        for job in self.jobs:
            entry = {
                "name": job.name,
                "operation": job.operation,
                "left": job.left_dataset,
                "right": job.right_dataset,
                "case_insensitive": job.case_insensitive,
            }
            if job.operation == "filter":
                entry["column"] = job.column
                entry["mode"] = job.mode
            else:
                entry["key_column"] = job.key_column
                entry["value_column"] = job.value_column
                entry["only_differences"] = job.only_differences
            if job.output:
                entry["output"] = job.output
            config_dict["jobs"].append(entry)

        with open(output_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)

        logger.info("config.saved", file=str(output_path))


SAMPLE_CONFIG = """# csvrecon configuration
# =====================

datasets:
  customers:
    path: "data/customers.csv"
  crm_export:
    path: "data/crm_export.xlsx"
  unsubscribed:
    path: "data/unsubscribed.csv"
    delimiter: ";"

jobs:
  # Drop customers that unsubscribed
  - name: "drop_unsubscribed"
    operation: "filter"
    left: "customers"
    right: "unsubscribed"
    column: "email"
    mode: "exclude"
    case_insensitive: true
    output: "out/customers_subscribed.csv"

  # Compare balances between the two systems
  - name: "balances"
    operation: "compare"
    left: "customers"
    right: "crm_export"
    key_column: "email"
    value_column: "balance"
    case_insensitive: true
    only_differences: false
    output: "out/balances.csv"
"""


def create_sample_config(output_path: Path):
    """
    Create a sample configuration file.

    Args:
        output_path: Where to save the config
    """
    Path(output_path).write_text(SAMPLE_CONFIG, encoding="utf-8")
    logger.info("config.sample_created", file=str(output_path))
